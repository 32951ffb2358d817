"""
Fallback query synthesizer — builds SQL mechanically from the schema when the
prompting agent produced nothing usable.

Intent comes from keyword lists (several locales). Ambiguous prompts fall back
to SELECT. UPDATE and DELETE are only emitted with a key condition.
"""
import logging
import re
from typing import Callable, Iterable, Mapping, Optional

from core.exceptions import UnsafeStatementError
from core.sql_rules import validate_statement
from models.query import QueryType
from models.schema import TableSchema

logger = logging.getLogger(__name__)

MANAGED_COLUMNS = {"id", "created_at", "updated_at", "deleted_at"}
DEFAULT_LIMIT = 10

# locale → intent → trigger words/phrases (whole-word, case-insensitive)
INTENT_KEYWORDS: dict[str, dict[QueryType, list[str]]] = {
    "en": {
        QueryType.SELECT: ["select", "get", "find", "show", "list", "fetch", "retrieve",
                           "search", "display", "view", "see", "look up", "count"],
        QueryType.INSERT: ["insert", "add", "create", "new", "save", "store", "put", "register"],
        QueryType.UPDATE: ["update", "change", "modify", "edit", "alter", "set", "rename"],
        QueryType.DELETE: ["delete", "remove", "erase", "clear", "purge"],
    },
    "es": {
        QueryType.SELECT: ["mostrar", "muestra", "listar", "lista", "buscar", "busca",
                           "obtener", "ver", "consultar", "encontrar"],
        QueryType.INSERT: ["insertar", "agregar", "añadir", "crear", "nuevo", "nueva", "guardar"],
        QueryType.UPDATE: ["actualizar", "actualiza", "modificar", "modifica", "cambiar", "editar"],
        QueryType.DELETE: ["eliminar", "elimina", "borrar", "borra", "quitar", "suprimir"],
    },
    "fr": {
        QueryType.SELECT: ["afficher", "affiche", "montrer", "montre", "lister", "liste",
                           "chercher", "trouver", "voir", "obtenir"],
        QueryType.INSERT: ["insérer", "ajouter", "ajoute", "créer", "nouveau", "nouvelle", "enregistrer"],
        QueryType.UPDATE: ["modifier", "modifie", "mettre à jour", "changer", "éditer"],
        QueryType.DELETE: ["supprimer", "supprime", "effacer", "retirer"],
    },
    "de": {
        QueryType.SELECT: ["zeige", "zeigen", "anzeigen", "liste", "auflisten", "finde",
                           "finden", "suche", "suchen", "hole"],
        QueryType.INSERT: ["einfügen", "hinzufügen", "erstelle", "erstellen", "neu", "neue", "neuen", "speichern"],
        QueryType.UPDATE: ["aktualisieren", "aktualisiere", "ändern", "ändere", "bearbeiten"],
        QueryType.DELETE: ["löschen", "lösche", "entfernen", "entferne"],
    },
}

_RECENCY = re.compile(
    r"\b(latest|newest|recent|recently|most recent|último|últimos|reciente|recientes"
    r"|récent|récents|dernier|derniers|neueste|neuesten|aktuellste)\b",
    re.IGNORECASE,
)
_ALL_ROWS = re.compile(r"\b(all|every|todos|todas|tous|toutes|alle)\b", re.IGNORECASE)
_DATE_HINTS = ("created_at", "updated_at", "date", "timestamp")


def _word(prompt: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", prompt, re.IGNORECASE) is not None


def classify_intent(prompt: str, locales: Optional[Iterable[str]] = None) -> QueryType:
    """Pick the single intent the prompt names; anything ambiguous is a SELECT."""
    matched: set[QueryType] = set()
    for locale in locales or INTENT_KEYWORDS:
        for intent, words in INTENT_KEYWORDS.get(locale, {}).items():
            if any(_word(prompt, w) for w in words):
                matched.add(intent)
    if len(matched) == 1:
        return matched.pop()
    if matched:
        logger.debug("Ambiguous intent %s, defaulting to SELECT", sorted(m.value for m in matched))
    return QueryType.SELECT


def mentioned_columns(prompt: str, columns: Iterable[str]) -> list[str]:
    """Columns named in the prompt, as-is or with underscores read as spaces."""
    return [
        c for c in columns
        if _word(prompt, c) or ("_" in c and _word(prompt, c.replace("_", " ")))
    ]


def _plain_columns(table: TableSchema) -> list[str]:
    return [
        name for name, col in table.columns.items()
        if name.lower() not in MANAGED_COLUMNS and not col.extra
    ]


def _date_column(table: TableSchema) -> Optional[str]:
    for hint in _DATE_HINTS:
        if hint in table.columns:
            return hint
    for name, col in table.columns.items():
        if "DATE" in col.type.upper() or "TIME" in col.type.upper():
            return name
    return None


def key_condition(prompt: str, table: TableSchema) -> list[str]:
    """Primary key columns, else the columns the prompt names. Empty if neither."""
    if table.primary_key:
        return list(table.primary_key)
    return mentioned_columns(prompt, table.columns)


# ── Builders ──────────────────────────────────────────────────────────────────

def build_select(prompt: str, name: str, table: TableSchema) -> str:
    if not table.columns:
        raise ValueError(f"table '{name}' has no columns")
    plain = _plain_columns(table)
    columns = mentioned_columns(prompt, plain) or plain or list(table.columns)

    sql = f"SELECT {', '.join(columns)} FROM {name}"
    if _RECENCY.search(prompt):
        order_col = _date_column(table)
        if order_col:
            sql += f" ORDER BY {order_col} DESC"
    if not _ALL_ROWS.search(prompt):
        sql += f" LIMIT {DEFAULT_LIMIT}"
    return sql


def build_insert(prompt: str, name: str, table: TableSchema) -> str:
    columns = _plain_columns(table)
    if not columns:
        raise ValueError(f"no writable columns in table '{name}'")
    placeholders = ", ".join(f":{c}" for c in columns)
    return f"INSERT INTO {name} ({', '.join(columns)}) VALUES ({placeholders})"


def build_update(prompt: str, name: str, table: TableSchema) -> str:
    keys = key_condition(prompt, table)
    if not keys:
        raise ValueError(f"no key condition could be derived for table '{name}'")
    settable = [c for c in _plain_columns(table) if c not in keys]
    columns = mentioned_columns(prompt, settable) or settable
    if not columns:
        raise ValueError(f"no updatable columns in table '{name}'")
    assignments = ", ".join(f"{c} = :{c}" for c in columns)
    where = " AND ".join(f"{k} = :where_{k}" for k in keys)
    return f"UPDATE {name} SET {assignments} WHERE {where}"


def build_delete(prompt: str, name: str, table: TableSchema) -> str:
    keys = key_condition(prompt, table)
    if not keys:
        raise ValueError(f"no key condition could be derived for table '{name}'")
    where = " AND ".join(f"{k} = :{k}" for k in keys)
    return f"DELETE FROM {name} WHERE {where}"


BUILDERS: dict[QueryType, Callable[[str, str, TableSchema], str]] = {
    QueryType.SELECT: build_select,
    QueryType.INSERT: build_insert,
    QueryType.UPDATE: build_update,
    QueryType.DELETE: build_delete,
}


def synthesize(
    prompt: str,
    tables: Mapping[str, TableSchema],
    locales: Optional[Iterable[str]] = None,
) -> tuple[list[str], list[str]]:
    """Build at most one validated statement for the first relevant table."""
    if not tables:
        return [], ["No tables available to build a fallback query"]

    intent = classify_intent(prompt, locales)
    name, table = next(iter(tables.items()))
    try:
        candidate = BUILDERS[intent](prompt, name, table)
    except ValueError as e:
        logger.info("Fallback %s skipped: %s", intent.value, e)
        return [], [f"Fallback {intent.value} query skipped: {e}"]

    try:
        query = validate_statement(candidate)
    except UnsafeStatementError as e:
        logger.warning("Fallback query rejected: %s", e)
        return [], [f"Fallback query validation failed: {e}"]
    return [query], [f"Used fallback query generation ({intent.value})"]
