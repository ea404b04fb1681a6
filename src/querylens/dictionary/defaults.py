"""Built-in business vocabulary.

Covers the eight tables of the demo schema plus the product, customer and
staff names, statuses, priorities and locations that show up in everyday
requests. Replace it with ``QL_DICTIONARY_PATH`` to point the tagger at a
different vocabulary.
"""

from functools import lru_cache

from querylens.dictionary.terms import TermDictionary

TABLE_SYNONYMS: dict[str, list[str]] = {
    "customers": ["customer", "customers", "client", "clients"],
    "products": ["product", "products", "item", "items"],
    "users": ["user", "users", "employee", "employees", "staff"],
    "tasks": ["task", "tasks", "assignment", "assignments", "todo", "todos"],
    "sales": ["sale", "sales", "transaction", "transactions", "revenue", "order", "orders"],
    "stock": ["stock", "inventory", "warehouse", "warehouses"],
    "shifts": ["shift", "shifts", "schedule", "schedules"],
    "attendance": ["attendance", "check-in", "check-out", "check-ins"],
}

# key: (table, synonyms, suggestions)
INFO_TERMS: dict[str, tuple[str | None, list[str], list[str]]] = {
    # products
    "laptop": (
        "products",
        ["laptops", "notebook computer"],
        ["laptop", "gaming laptop", "business laptop", "notebook computer"],
    ),
    "gaming laptop": ("products", ["gaming notebook"], ["gaming laptop", "gaming notebook", "laptop"]),
    "business laptop": ("products", ["enterprise laptop"], ["business laptop", "enterprise laptop", "laptop"]),
    "mouse": (
        "products",
        ["mice", "computer mouse"],
        ["mouse", "wireless mouse", "computer mouse", "gaming mouse"],
    ),
    "wireless mouse": ("products", ["bluetooth mouse"], ["wireless mouse", "bluetooth mouse", "mouse"]),
    "keyboard": (
        "products",
        ["keyboards", "computer keyboard"],
        ["keyboard", "mechanical keyboard", "computer keyboard"],
    ),
    "mechanical keyboard": ("products", ["gaming keyboard"], ["mechanical keyboard", "gaming keyboard", "keyboard"]),
    "monitor": (
        "products",
        ["monitors", "display", "screen"],
        ["monitor", "external monitor", "display", "screen"],
    ),
    "external monitor": ("products", ["external display"], ["external monitor", "external display", "monitor"]),
    "headphones": (
        "products",
        ["earphones", "headset"],
        ["headphones", "wireless headphones", "earphones", "headset"],
    ),
    "wireless headphones": (
        "products",
        ["bluetooth headphones"],
        ["wireless headphones", "bluetooth headphones", "headphones"],
    ),
    "usb cable": ("products", ["usb cord"], ["usb cable", "usb cord", "cable"]),
    "cable": ("products", ["cables", "cord"], ["cable", "usb cable", "cord"]),
    "charger": ("products", ["chargers", "power adapter"], ["charger", "power adapter"]),
    "usb-c hub": ("products", ["usb hub", "hub"], ["usb-c hub", "usb hub", "hub"]),
    "webcam": ("products", ["web camera", "camera"], ["webcam", "web camera"]),
    "tablet": ("products", ["tablets"], ["tablet"]),
    # customers
    "ahmed hassan": ("customers", ["ahmed", "hassan"], ["ahmed hassan", "ahmed"]),
    "john doe": ("customers", ["john"], ["john doe", "john"]),
    "lisa brown": ("customers", ["lisa"], ["lisa brown", "lisa"]),
    "michael lee": ("customers", ["michael"], ["michael lee", "michael"]),
    "acme corporation": ("customers", ["acme corp", "acme"], ["acme corporation", "acme corp", "acme"]),
    "tech solutions": ("customers", [], ["tech solutions"]),
    "global systems": ("customers", [], ["global systems"]),
    "microsoft corporation": ("customers", ["microsoft corp", "microsoft"], ["microsoft corporation", "microsoft"]),
    "apple inc": ("customers", ["apple"], ["apple inc", "apple"]),
    # staff
    "jane smith": ("users", ["jane"], ["jane smith", "jane"]),
    "mike johnson": ("users", ["mike"], ["mike johnson", "mike"]),
    "sarah wilson": ("users", ["sarah"], ["sarah wilson", "sarah"]),
    # untyped
    "work from home": (None, ["remote work", "home office"], ["work from home", "remote work"]),
}

# key: (field_kind, table, synonyms)
STATUS_TERMS: dict[str, tuple[str, str | None, list[str]]] = {
    "pending": ("status", "tasks", ["pending", "waiting", "on hold"]),
    "completed": ("status", "tasks", ["completed", "complete", "finished", "done", "resolved"]),
    "in_progress": ("status", "tasks", ["in progress", "in_progress", "ongoing"]),
    "cancelled": ("status", None, ["cancelled", "canceled", "aborted"]),
    "active": ("status", "customers", ["active"]),
    "inactive": ("status", "customers", ["inactive"]),
    "processing": ("status", "sales", ["processing"]),
    "shipped": ("status", "sales", ["shipped"]),
    "delivered": ("status", "sales", ["delivered"]),
    "present": ("status", "attendance", ["present"]),
    "absent": ("status", "attendance", ["absent"]),
    "late": ("status", "attendance", ["late"]),
    "high": ("priority", "tasks", ["high priority", "urgent", "critical"]),
    "medium": ("priority", "tasks", ["medium priority", "normal priority"]),
    "low": ("priority", "tasks", ["low priority"]),
}

LOCATIONS: dict[str, list[str]] = {
    "paris": [],
    "london": [],
    "new york": ["nyc", "new york city"],
    "tokyo": [],
    "berlin": [],
    "madrid": [],
    "dubai": [],
    "cairo": [],
}

LESS_THAN = ["below", "under", "less than", "lower than", "fewer than"]
GREATER_THAN = ["above", "over", "greater than", "more than", "higher than"]

LOCATION_PREPOSITIONS = ["in", "at", "from", "near", "within", "inside"]

STOP_WORDS = [
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "had", "her",
    "was", "one", "our", "out", "day", "get", "has", "him", "his", "how", "its",
    "may", "new", "now", "old", "see", "two", "who", "boy", "did", "what", "when",
    "where", "will", "with", "have", "this", "that", "they", "from", "show", "find",
    "give", "take", "come", "work", "said", "each", "much", "back", "call", "came",
    "good", "just", "know", "last", "left", "life", "live", "look", "made", "make",
    "most", "move", "must", "name", "need", "only", "over", "part", "play", "right",
    "seem", "tell", "time", "turn", "very", "want", "ways", "well", "went", "were",
    "year", "your", "list", "which", "than", "below", "above", "under", "less",
    "more", "greater", "lower", "higher", "fewer", "near", "within", "inside",
    "any", "there", "into", "about", "please", "next", "current", "previous",
    "week", "month", "today", "yesterday", "tomorrow", "mine", "myself",
]

EXAMPLE_REQUESTS = [
    "my tasks",
    "sales today",
    "stock below 10",
    "customers in london",
    "laptop stock in paris below 5",
    "pending tasks this week",
]


@lru_cache(maxsize=1)
def default_dictionary() -> TermDictionary:
    """Build the built-in dictionary (cached, immutable)."""
    return TermDictionary(
        tables={
            name: {"table": name, "synonyms": synonyms, "suggestions": synonyms}
            for name, synonyms in TABLE_SYNONYMS.items()
        },
        terms={
            key: {"table": table, "synonyms": synonyms, "suggestions": suggestions}
            for key, (table, synonyms, suggestions) in INFO_TERMS.items()
        },
        statuses={
            key: {"field_kind": kind, "table": table, "synonyms": synonyms}
            for key, (kind, table, synonyms) in STATUS_TERMS.items()
        },
        locations=LOCATIONS,
        less_than=LESS_THAN,
        greater_than=GREATER_THAN,
        location_prepositions=LOCATION_PREPOSITIONS,
        stop_words=STOP_WORDS,
        examples=EXAMPLE_REQUESTS,
    )
