"""Table ambiguity detection and clarification questions.

A request made only of business terms (``mouse``, ``jane``) names a thing,
not a table: a product can be listed, sold or stocked. When every info term
belongs to one table that other tables reference, the planner asks the user
to pick instead of guessing.
"""

from querylens.planning.catalog import TableCatalog
from querylens.planning.schema import CandidateTable
from querylens.tagging.models import EntityMatch, EntityType

OWN_TABLE_WEIGHT = 1.0
REFERENCING_TABLE_WEIGHT = 0.5


def rank_candidate_tables(entities: list[EntityMatch], catalog: TableCatalog) -> list[CandidateTable]:
    """
    Rank the tables an info-only request could refer to.

    Returns an empty list when the request is not ambiguous: it holds
    anything other than info entities, its info terms span several tables
    (composition rules decide those), or the single owning table is not
    referenced by any other table.

    Args:
        entities: Tagged entities
        catalog: Table catalog providing the join map

    Returns:
        Candidates sorted by descending score; ties keep catalog order
    """
    if not entities or any(e.type is not EntityType.INFO for e in entities):
        return []

    owners = [e.table for e in entities if e.table]
    if not owners or len(set(owners)) != 1:
        return []

    owner = owners[0]
    referencing = catalog.referencing_tables(owner)
    if not referencing:
        return []

    weight = len(owners)
    candidates = [CandidateTable(table=owner, score=OWN_TABLE_WEIGHT * weight)]
    candidates += [
        CandidateTable(table=name, score=REFERENCING_TABLE_WEIGHT * weight) for name in referencing
    ]
    return sorted(candidates, key=lambda c: -c.score)


def collect_suggestions(entities: list[EntityMatch], limit: int | None = None) -> list[str]:
    """Union of entity suggestions, order preserved, duplicates removed."""
    suggestions: list[str] = []
    for entity in entities:
        for suggestion in entity.suggestions:
            if suggestion not in suggestions:
                suggestions.append(suggestion)
    return suggestions[:limit] if limit is not None else suggestions


def ambiguity_to_question(candidates: list[CandidateTable], terms: list[str]) -> dict:
    """
    Convert table candidates into a human-readable question.

    Args:
        candidates: Ranked candidate tables
        terms: Request terms that caused the ambiguity

    Returns:
        Question dict with format:
        {
            "question": "human-readable question",
            "options": ["table1", "table2", ...],
            "type": "single_choice"
        }
    """
    options = [c.table for c in candidates]
    subject = ", ".join(f"'{t}'" for t in terms) or "your request"
    if len(options) > 1:
        listed = ", ".join(options[:-1]) + f" or {options[-1]}"
    else:
        listed = options[0] if options else "a table"
    return {
        "question": f"Which data do you want for {subject}: {listed}?",
        "options": options,
        "type": "single_choice",
    }


def apply_table_choice(candidates: list[CandidateTable], choice: str) -> str:
    """
    Validate a user's answer to an ambiguity question.

    Args:
        candidates: Candidates offered to the user
        choice: Chosen table name

    Returns:
        The chosen table

    Raises:
        ValueError: If choice is not among the offered candidates
    """
    options = [c.table for c in candidates]
    if choice not in options:
        raise ValueError(f"Invalid choice '{choice}'. Must be one of: {options}")
    return choice
