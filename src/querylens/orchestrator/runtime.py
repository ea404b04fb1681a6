"""Query engine: tagger -> planner -> filter compiler -> data store.

Data flows strictly forward. Hard errors from the planner become
clarification responses (``no_entity_found``, ``ambiguous_table``); soft
errors from the compiler are already recorded as plan diagnostics; a failed
execution raises ``ExecutorFailure``.
"""

import logging
import time
from datetime import datetime

from pydantic import BaseModel, Field

from querylens.config import QueryLensConfig
from querylens.dictionary.defaults import default_dictionary
from querylens.dictionary.fuzzy import FuzzyTermResolver
from querylens.dictionary.loader import load_dictionary
from querylens.dictionary.terms import TermDictionary
from querylens.errors import AmbiguousTable, ExecutorFailure, NoEntityFound
from querylens.execution.adapter import DataStoreAdapter
from querylens.execution.duckdb_store import DuckDBDataStore
from querylens.logging_setup import set_corr_id
from querylens.planning.ambiguity import ambiguity_to_question, collect_suggestions
from querylens.planning.catalog import TableCatalog, default_catalog
from querylens.planning.filters import FilterCompiler
from querylens.planning.planner import QueryPlanner
from querylens.planning.schema import PlanResponse, QueryResult, ResponseStatus
from querylens.tagging.lexer import tokenize
from querylens.tagging.models import EntityMatch, UserContext
from querylens.tagging.tagger import MIN_FALLBACK_LENGTH, EntityTagger

logger = logging.getLogger(__name__)


class QueryRequest(BaseModel):
    """One natural-language request."""

    text: str = Field(..., description="Free-text request")
    user_display_name: str | None = Field(None, description="Full name of the asking user")
    now: datetime | None = Field(None, description="Reference time (defaults to now)")
    table: str | None = Field(None, description="Primary table chosen after an ambiguity question")
    row_limit: int | None = Field(None, ge=1, description="Override for the configured row limit")


class QueryEngine:
    """End-to-end request handling.

    Usage:
        engine = QueryEngine(DuckDBDataStore("data/querylens.duckdb"))
        result = engine.run(QueryRequest(text="my tasks", user_display_name="Ahmed Hassan"))
    """

    def __init__(
        self,
        store: DataStoreAdapter | None = None,
        *,
        dictionary: TermDictionary | None = None,
        catalog: TableCatalog | None = None,
        config: QueryLensConfig | None = None,
    ):
        """Initialize engine.

        Args:
            store: Data store adapter; required for ``run`` and user scoping
            dictionary: Term dictionary (defaults to the built-in one)
            catalog: Table catalog (defaults to the demo schema)
            config: Runtime configuration
        """
        self.config = config or QueryLensConfig()
        self.store = store
        self.dictionary = dictionary or default_dictionary()
        self.catalog = catalog or default_catalog()
        self.resolver = FuzzyTermResolver(self.dictionary)
        self.tagger = EntityTagger(
            self.dictionary, self.resolver, max_suggestions=self.config.max_suggestions
        )
        self.planner = QueryPlanner(
            self.catalog,
            row_limit=self.config.row_limit,
            max_suggestions=self.config.max_suggestions,
        )
        self.compiler = FilterCompiler(
            self.catalog, user_lookup=store.find_user_by_name if store is not None else None
        )

    @classmethod
    def from_config(cls, config: QueryLensConfig, *, with_store: bool = True) -> "QueryEngine":
        """Build an engine from config.

        Raises:
            DictionaryError: If ``config.dictionary_path`` cannot be loaded
        """
        dictionary = load_dictionary(config.dictionary_path) if config.dictionary_path else None
        catalog = default_catalog()
        store = DuckDBDataStore(config.db_path, catalog) if with_store else None
        return cls(store, dictionary=dictionary, catalog=catalog, config=config)

    def tag(self, text: str, context: UserContext | None = None) -> list[EntityMatch]:
        return self.tagger.tag(text, context)

    def analyze(self, request: QueryRequest) -> PlanResponse:
        """Tag, plan and compile a request without executing it.

        Args:
            request: The request to analyse

        Returns:
            PlanResponse with status ``ok`` and a compiled plan, or a
            clarification response with candidates and suggestions
        """
        set_corr_id()
        started = time.perf_counter()
        context = UserContext(
            display_name=request.user_display_name, now=request.now or datetime.now()
        )
        entities = self.tagger.tag(request.text, context)

        try:
            plan = self.planner.plan(entities, request.text, preferred_table=request.table)
        except NoEntityFound:
            suggestions = self._fallback_suggestions(request.text)
            logger.info("No entities in %r", request.text)
            return PlanResponse(
                status=ResponseStatus.NO_ENTITY_FOUND,
                text=request.text,
                entities=entities,
                suggestions=suggestions,
                message="I couldn't find anything to look up. Try: " + "; ".join(suggestions),
            )
        except AmbiguousTable as e:
            question = ambiguity_to_question(e.candidates, [en.text for en in entities])
            logger.info("Ambiguous request %r: %s", request.text, question["options"])
            return PlanResponse(
                status=ResponseStatus.AMBIGUOUS_TABLE,
                text=request.text,
                entities=entities,
                candidates=e.candidates,
                suggestions=e.suggestions,
                message=question["question"],
            )

        if request.row_limit is not None:
            plan.row_limit = request.row_limit
        plan.predicates = self.compiler.compile(entities, plan)

        logger.info(
            "Analyzed %r in %.1fms: primary=%s predicates=%d diagnostics=%d",
            request.text,
            (time.perf_counter() - started) * 1000,
            plan.primary_table,
            len(plan.predicates),
            len(plan.diagnostics),
        )
        return PlanResponse(
            status=ResponseStatus.OK,
            text=request.text,
            entities=entities,
            plan=plan,
            suggestions=collect_suggestions(entities, self.config.max_suggestions),
        )

    def run(self, request: QueryRequest) -> QueryResult:
        """Analyse a request and execute its plan.

        Returns:
            QueryResult with rows; clarification responses are returned
            without touching the data store

        Raises:
            ExecutorFailure: If no store is configured or execution fails
        """
        response = self.analyze(request)
        if not response.ok:
            return QueryResult(**dict(response))

        if self.store is None:
            raise ExecutorFailure("No data store configured")

        result = self.store.execute(response.plan)
        if not result.success:
            logger.warning("Execution failed for %r: %s", request.text, result.error)
            raise ExecutorFailure(
                result.error or "execution failed",
                sql=result.sql_executed or result.sql_original,
            )

        return QueryResult(
            **dict(response),
            rows=result.rows,
            sql=result.sql_executed,
            row_count=result.row_count,
            truncated=result.truncated,
            execution_time_ms=result.execution_time_ms,
        )

    def _fallback_suggestions(self, text: str) -> list[str]:
        limit = self.config.max_suggestions
        suggestions: list[str] = []
        for token in tokenize(text):
            if token.is_number or len(token.norm) < MIN_FALLBACK_LENGTH:
                continue
            if self.dictionary.is_stop_word(token.norm):
                continue
            for suggestion in self.resolver.suggest(token.norm, limit=limit):
                if suggestion not in suggestions:
                    suggestions.append(suggestion)
        if not suggestions:
            suggestions = list(self.dictionary.examples)
        return suggestions[:limit]
