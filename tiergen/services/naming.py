"""
Identifier derivation.
Every generated class, interface, method and file name comes from these functions,
so all generators spell a table's identifiers the same way.
"""
from __future__ import annotations

import re
from typing import NamedTuple

from tiergen.core.exceptions import InvalidIdentifierError

_CSHARP_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_SQL_FORBIDDEN_CHARS = frozenset('[]"\\\'')

# Reserved words; contextual keywords (var, value, async, ...) are legal member names
CSHARP_KEYWORDS = frozenset({
    "abstract", "as", "base", "bool", "break", "byte", "case", "catch", "char",
    "checked", "class", "const", "continue", "decimal", "default", "delegate", "do",
    "double", "else", "enum", "event", "explicit", "extern", "false", "finally",
    "fixed", "float", "for", "foreach", "goto", "if", "implicit", "in", "int",
    "interface", "internal", "is", "lock", "long", "namespace", "new", "null",
    "object", "operator", "out", "override", "params", "private", "protected",
    "public", "readonly", "ref", "return", "sbyte", "sealed", "short", "sizeof",
    "stackalloc", "static", "string", "struct", "switch", "this", "throw", "true",
    "try", "typeof", "uint", "ulong", "unchecked", "unsafe", "ushort", "using",
    "virtual", "void", "volatile", "while",
})

# Types declared by the generated Program.cs alongside the per-table adapters
CONSOLE_TYPE_NAMES = (
    "Program",
    "ITableOperations",
    "ColumnInfo",
    "Records",
    "ValueParser",
    "ValueFormatter",
)


# ── Validation ────────────────────────────────────────────────────────────────

def validate_identifier(name: str, kind: str = "Table") -> str:
    """Ensure a schema name is usable both as a C# identifier and inside [brackets]."""
    if not isinstance(name, str) or not _CSHARP_IDENTIFIER_RE.match(name):
        raise InvalidIdentifierError(kind, name)
    return name


def validate_sql_name(name: str, kind: str = "Schema") -> str:
    """Looser check for names that only ever appear inside generated SQL text."""
    if (
        not isinstance(name, str)
        or not name
        or any(ch in _SQL_FORBIDDEN_CHARS or not ch.isprintable() for ch in name)
    ):
        raise InvalidIdentifierError(kind, name)
    return name


def member_name(name: str) -> str:
    """C# member spelling of a column: reserved words get the verbatim '@' prefix."""
    return f"@{name}" if name in CSHARP_KEYWORDS else name


def quote_sql_identifier(name: str, kind: str = "Column") -> str:
    """Bracket-quote a validated schema identifier for interpolation into SQL."""
    return f"[{validate_sql_name(name, kind)}]"


def qualified_table_sql(schema_name: str, table_name: str) -> str:
    return f"{quote_sql_identifier(schema_name, 'Schema')}.{quote_sql_identifier(table_name, 'Table')}"


# ── Type names ────────────────────────────────────────────────────────────────

def dto_class_name(table_name: str) -> str:
    return f"{table_name}DTO"


def repository_interface_name(table_name: str) -> str:
    return f"I{table_name}Repository"


def repository_class_name(table_name: str) -> str:
    return f"{table_name}Repository"


def service_interface_name(table_name: str) -> str:
    return f"I{table_name}Service"


def service_class_name(table_name: str) -> str:
    return f"{table_name}Service"


def operations_class_name(table_name: str) -> str:
    return f"{table_name}Operations"


# ── Method names ──────────────────────────────────────────────────────────────

def get_all_method_name(table_name: str) -> str:
    return f"GetAll{table_name}sAsync"


def get_by_id_method_name(table_name: str) -> str:
    return f"Get{table_name}ByIdAsync"


def add_method_name(table_name: str) -> str:
    return f"Add{table_name}Async"


def update_method_name(table_name: str) -> str:
    return f"Update{table_name}Async"


def delete_method_name(table_name: str) -> str:
    return f"Delete{table_name}Async"


# ── Files ─────────────────────────────────────────────────────────────────────

def source_file_name(identifier: str) -> str:
    return f"{identifier}.cs"


def project_file_name(project_name: str) -> str:
    return f"{project_name}.csproj"


def solution_file_name(solution_name: str) -> str:
    if not solution_name or any(ch in solution_name for ch in '/\\:*?"<>|') or solution_name in (".", ".."):
        raise InvalidIdentifierError("Solution", solution_name)
    return f"{solution_name}.sln"


class TableNames(NamedTuple):
    dto: str
    repository_interface: str
    repository: str
    service_interface: str
    service: str
    operations: str


def table_names(table_name: str) -> TableNames:
    """All type identifiers generated for one table."""
    return TableNames(
        dto=dto_class_name(table_name),
        repository_interface=repository_interface_name(table_name),
        repository=repository_class_name(table_name),
        service_interface=service_interface_name(table_name),
        service=service_class_name(table_name),
        operations=operations_class_name(table_name),
    )
