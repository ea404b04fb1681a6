"""Demo database with the eight business tables.

Timestamps are relative to ``now`` so that requests such as "sales today"
or "tasks this week" always return rows.
"""

import logging
from datetime import datetime, time, timedelta
from pathlib import Path

import duckdb

logger = logging.getLogger(__name__)

DEMO_USER = "Ahmed Hassan"

SCHEMA: dict[str, str] = {
    "users": """
        CREATE TABLE users (
            id VARCHAR PRIMARY KEY,
            email VARCHAR,
            full_name VARCHAR,
            role VARCHAR,
            created_at TIMESTAMP
        )
    """,
    "customers": """
        CREATE TABLE customers (
            id VARCHAR PRIMARY KEY,
            name VARCHAR,
            email VARCHAR,
            phone VARCHAR,
            company VARCHAR,
            address VARCHAR,
            city VARCHAR,
            status VARCHAR,
            created_at TIMESTAMP
        )
    """,
    "products": """
        CREATE TABLE products (
            id VARCHAR PRIMARY KEY,
            name VARCHAR,
            description VARCHAR,
            price DECIMAL(10, 2),
            sku VARCHAR,
            category VARCHAR,
            created_at TIMESTAMP
        )
    """,
    "stock": """
        CREATE TABLE stock (
            id VARCHAR PRIMARY KEY,
            product_id VARCHAR,
            warehouse_location VARCHAR,
            quantity_available INTEGER,
            reserved_quantity INTEGER,
            reorder_level INTEGER,
            last_restocked TIMESTAMP,
            created_at TIMESTAMP
        )
    """,
    "sales": """
        CREATE TABLE sales (
            id VARCHAR PRIMARY KEY,
            customer_id VARCHAR,
            product_id VARCHAR,
            sales_rep_id VARCHAR,
            quantity INTEGER,
            unit_price DECIMAL(10, 2),
            total_amount DECIMAL(12, 2),
            sale_date DATE,
            status VARCHAR,
            notes VARCHAR,
            created_at TIMESTAMP
        )
    """,
    "tasks": """
        CREATE TABLE tasks (
            id VARCHAR PRIMARY KEY,
            title VARCHAR,
            description VARCHAR,
            assigned_to VARCHAR,
            status VARCHAR,
            priority VARCHAR,
            due_date DATE,
            completed_at TIMESTAMP,
            created_at TIMESTAMP
        )
    """,
    "shifts": """
        CREATE TABLE shifts (
            id VARCHAR PRIMARY KEY,
            user_id VARCHAR,
            shift_date DATE,
            start_time TIME,
            end_time TIME,
            break_duration INTEGER,
            location VARCHAR,
            notes VARCHAR,
            created_at TIMESTAMP
        )
    """,
    "attendance": """
        CREATE TABLE attendance (
            id VARCHAR PRIMARY KEY,
            user_id VARCHAR,
            shift_id VARCHAR,
            clock_in TIMESTAMP,
            clock_out TIMESTAMP,
            status VARCHAR,
            total_hours DECIMAL(5, 2),
            notes VARCHAR,
            created_at TIMESTAMP
        )
    """,
}


def _demo_rows(now: datetime) -> dict[str, list[tuple]]:
    today = now.date()

    def at(days_ago: int, hour: int, minute: int = 0) -> datetime:
        return datetime.combine(today - timedelta(days=days_ago), time(hour, minute))

    return {
        "users": [
            ("u1", "ahmed.hassan@example.com", DEMO_USER, "manager", at(400, 9)),
            ("u2", "jane.smith@example.com", "Jane Smith", "sales", at(380, 9)),
            ("u3", "mike.johnson@example.com", "Mike Johnson", "warehouse", at(300, 9)),
            ("u4", "sarah.wilson@example.com", "Sarah Wilson", "support", at(120, 9)),
        ],
        "customers": [
            ("c1", "Ahmed Hassan", "ahmed@hassan-trading.com", "+44 20 7946 0001",
             "Hassan Trading", "12 King Street", "London", "active", at(200, 10)),
            ("c2", "John Doe", "john.doe@acme.com", "+33 1 4020 0002",
             "Acme Corporation", "8 Rue de Rivoli", "Paris", "active", at(150, 10)),
            ("c3", "Lisa Brown", "lisa@techsolutions.io", "+44 20 7946 0003",
             "Tech Solutions", "221 Baker Street", "London", "inactive", at(90, 10)),
            ("c4", "Michael Lee", "mlee@globalsystems.com", "+1 212 555 0004",
             "Global Systems", "350 5th Avenue", "New York", "active", at(60, 10)),
            ("c5", "Yuki Tanaka", "yuki@microsoft.example", "+81 3 5555 0005",
             "Microsoft Corporation", "1-1 Marunouchi", "Tokyo", "active", at(30, 10)),
        ],
        "products": [
            ("p1", "Gaming Laptop", "High-end gaming laptop", 1899.00, "LAP-GAM-01", "laptops", at(300, 8)),
            ("p2", "Business Laptop", "Lightweight business laptop", 1199.00, "LAP-BUS-01", "laptops", at(300, 8)),
            ("p3", "Wireless Mouse", "Bluetooth wireless mouse", 29.99, "MOU-WL-01", "accessories", at(250, 8)),
            ("p4", "Mechanical Keyboard", "Mechanical keyboard with RGB", 89.00, "KEY-MEC-01", "accessories", at(250, 8)),
            ("p5", "External Monitor", "27 inch external monitor", 249.00, "MON-EXT-27", "displays", at(200, 8)),
            ("p6", "USB Cable", "1m USB-C cable", 9.99, "CAB-USB-01", "accessories", at(200, 8)),
            ("p7", "USB-C Hub", "7-port USB-C hub", 39.00, "HUB-USC-07", "accessories", at(100, 8)),
            ("p8", "Wireless Headphones", "Noise cancelling headphones", 129.00, "AUD-WH-01", "audio", at(100, 8)),
            ("p9", "Webcam HD", "1080p webcam", 59.00, "CAM-HD-01", "video", at(50, 8)),
        ],
        "stock": [
            ("s1", "p1", "Paris Warehouse", 3, 1, 5, at(20, 7), at(300, 8)),
            ("s2", "p2", "Paris Warehouse", 12, 2, 5, at(15, 7), at(300, 8)),
            ("s3", "p1", "London Warehouse", 8, 0, 5, at(10, 7), at(300, 8)),
            ("s4", "p3", "Paris Warehouse", 150, 10, 50, at(5, 7), at(250, 8)),
            ("s5", "p4", "Berlin Depot", 7, 0, 10, at(30, 7), at(250, 8)),
            ("s6", "p5", "London Warehouse", 25, 5, 10, at(12, 7), at(200, 8)),
            ("s7", "p6", "Paris Warehouse", 4, 0, 20, at(40, 7), at(200, 8)),
            ("s8", "p9", "Tokyo Hub", 60, 0, 15, at(3, 7), at(50, 8)),
        ],
        "sales": [
            ("sa1", "c1", "p3", "u2", 2, 29.99, 59.98, today, "processing",
             "Two wireless mice", at(0, 9, 15)),
            ("sa2", "c2", "p1", "u2", 1, 1899.00, 1899.00, today, "delivered",
             "Express delivery", at(0, 11, 40)),
            ("sa3", "c3", "p4", "u1", 3, 89.00, 267.00, today - timedelta(days=1), "shipped",
             None, at(1, 16, 5)),
            ("sa4", "c4", "p2", "u2", 5, 1199.00, 5995.00, today - timedelta(days=8), "delivered",
             "Bulk order", at(8, 14, 0)),
            ("sa5", "c5", "p5", "u1", 2, 249.00, 498.00, today - timedelta(days=35), "cancelled",
             "Customer cancelled", at(35, 10, 30)),
        ],
        "tasks": [
            ("t1", "Prepare quarterly sales report", "Summarise sales by region", "u1",
             "pending", "high", today + timedelta(days=3), None, at(0, 8)),
            ("t2", "Restock Paris warehouse laptops", "Order gaming laptops", "u1",
             "in_progress", "medium", today + timedelta(days=1), None, at(2, 8)),
            ("t3", "Call Acme Corporation about renewal", None, "u2",
             "pending", "low", today + timedelta(days=7), None, at(4, 8)),
            ("t4", "Update product catalogue", "Add webcam listing", "u1",
             "completed", "low", today - timedelta(days=2), at(2, 17), at(20, 8)),
            ("t5", "Audit London warehouse", None, "u3",
             "pending", "high", today + timedelta(days=5), None, at(1, 8)),
        ],
        "shifts": [
            ("sh1", "u1", today, time(9, 0), time(17, 0), 45, "London Office", None, at(7, 12)),
            ("sh2", "u3", today, time(8, 0), time(16, 0), 30, "Paris Warehouse", "Inventory count", at(7, 12)),
            ("sh3", "u2", today - timedelta(days=1), time(10, 0), time(18, 0), 60, "Berlin Office", None, at(8, 12)),
        ],
        "attendance": [
            ("a1", "u1", "sh1", at(0, 8, 58), at(0, 17, 1), "present", 7.5, None, at(0, 8, 58)),
            ("a2", "u3", "sh2", at(0, 8, 20), at(0, 16, 0), "late", 7.0, "Traffic", at(0, 8, 20)),
            ("a3", "u2", "sh3", at(1, 9, 55), at(1, 18, 2), "present", 8.0, None, at(1, 9, 55)),
        ],
    }


def seed_demo_database(db_path: Path | str, *, now: datetime | None = None) -> dict[str, int]:
    """Create (or recreate) the demo tables and rows.

    Args:
        db_path: Path to the DuckDB file; parent directories are created
        now: Reference time for relative timestamps (defaults to now)

    Returns:
        Mapping of table name to inserted row count
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    rows_by_table = _demo_rows(now or datetime.now())

    counts: dict[str, int] = {}
    conn = duckdb.connect(str(db_path))
    try:
        for table, ddl in SCHEMA.items():
            conn.execute(f"DROP TABLE IF EXISTS {table}")
            conn.execute(ddl)
            rows = rows_by_table[table]
            placeholders = ", ".join(["?"] * len(rows[0]))
            conn.executemany(f"INSERT INTO {table} VALUES ({placeholders})", rows)
            counts[table] = len(rows)
    finally:
        conn.close()

    logger.info("Seeded demo database %s: %s", db_path, counts)
    return counts
