"""
Tenant namespace naming.

`derive_namespace` turns a tenant identifier into the name of its dedicated
PostgreSQL schema. `SchemaName` is the only type the rest of the code accepts
where a namespace ends up inside a statement, so an unvalidated string cannot
reach SQL.
"""

import re
from typing import Union

from app.core.config import settings
from app.errors import InvalidNamespaceError

# PostgreSQL truncates identifiers longer than NAMEDATALEN - 1 bytes.
MAX_IDENTIFIER_LENGTH = 63

_SAFE_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")
_UNSAFE_CHARS = re.compile(r"[^a-z0-9]")

_SYSTEM_SCHEMAS = frozenset({"public", "information_schema"})

# Reserved key words in PostgreSQL that cannot be used as a bare schema name.
_RESERVED_WORDS = frozenset({
    "all", "analyse", "analyze", "and", "any", "array", "as", "asc",
    "asymmetric", "both", "case", "cast", "check", "collate", "column",
    "constraint", "create", "current_catalog", "current_date", "current_role",
    "current_time", "current_timestamp", "current_user", "default",
    "deferrable", "desc", "distinct", "do", "else", "end", "except", "false",
    "fetch", "for", "foreign", "from", "grant", "group", "having", "in",
    "initially", "intersect", "into", "lateral", "leading", "limit",
    "localtime", "localtimestamp", "not", "null", "offset", "on", "only", "or",
    "order", "placing", "primary", "references", "returning", "select",
    "session_user", "some", "symmetric", "system_user", "table", "then", "to",
    "trailing", "true", "union", "unique", "user", "using", "variadic", "when",
    "where", "window", "with",
})


class SchemaName(str):
    """
    A schema identifier that is safe to put into a statement.

    Construction fails with InvalidNamespaceError unless the value contains
    only lowercase alphanumerics and underscores, starts with a letter or an
    underscore, fits PostgreSQL's identifier limit and is not a reserved or
    system name.
    """

    __slots__ = ()

    def __new__(cls, value: str) -> "SchemaName":
        if isinstance(value, SchemaName):
            return value
        if not isinstance(value, str):
            raise InvalidNamespaceError(f"Namespace must be a string, got {type(value).__name__}")
        if not _SAFE_IDENTIFIER.match(value):
            raise InvalidNamespaceError(f"Namespace {value!r} contains unsafe characters")
        if len(value.encode("utf-8")) > MAX_IDENTIFIER_LENGTH:
            raise InvalidNamespaceError(
                f"Namespace {value!r} exceeds {MAX_IDENTIFIER_LENGTH} bytes"
            )
        if value in _SYSTEM_SCHEMAS or value.startswith("pg_") or value == settings.CONTROL_SCHEMA:
            raise InvalidNamespaceError(f"Namespace {value!r} is reserved for the system")
        if value in _RESERVED_WORDS:
            raise InvalidNamespaceError(f"Namespace {value!r} is a reserved word")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"SchemaName({str.__repr__(self)})"


def sanitize_identifier(raw: str) -> str:
    """Lowercase and replace every character outside [a-z0-9] with an underscore."""
    return _UNSAFE_CHARS.sub("_", raw.lower())


def derive_namespace(tenant_id: Union[str, int], prefix: str | None = None) -> SchemaName:
    """
    Derive the schema name for a tenant.

    Pure and deterministic: "acme-1" always yields "tenant_acme_1". Blank
    identifiers are rejected rather than mapped onto the bare prefix.
    """
    if isinstance(tenant_id, bool) or not isinstance(tenant_id, (str, int)):
        raise InvalidNamespaceError(f"Unsupported tenant identifier type {type(tenant_id).__name__}")

    raw = str(tenant_id).strip()
    if not raw:
        raise InvalidNamespaceError("Tenant identifier is empty")

    marker = settings.TENANT_SCHEMA_PREFIX if prefix is None else prefix
    return SchemaName(f"{marker}{sanitize_identifier(raw)}")
