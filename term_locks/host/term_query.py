# ==============================================
# Term Query Builder
# ==============================================
#
# PURPOSE:
#   Build the SELECT that lists terms for a set of taxonomies,
#   giving every subscriber a chance to rewrite it through the
#   "get_terms_orderby" and "terms_clauses" filters.
#
# CLAUSES:
# --------
#   A plain dict with string fragments:
#     fields, join, where, orderby, order, limits
#   "t" aliases the terms table. Subscribers append to the
#   fragments; anything they don't understand is left alone.
#
# ==============================================

from typing import Any, Dict, List, Optional, Tuple

ORDERBY_COLUMNS = {
    "name": "t.name",
    "slug": "t.slug",
    "term_id": "t.term_id",
    "id": "t.term_id",
    "none": "",
}


def base_clauses(taxonomies: List[str], args: Dict[str, Any]) -> Dict[str, str]:
    # Default clause set before any filter runs
    placeholders = ", ".join(["%s"] * len(taxonomies))
    where = f"t.taxonomy IN ({placeholders})" if taxonomies else "1=1"

    orderby_column = ORDERBY_COLUMNS.get(str(args.get("orderby", "name")), "t.name")
    order = "DESC" if str(args.get("order", "ASC")).upper() == "DESC" else "ASC"

    limits = ""
    if args.get("number"):
        limits = f"LIMIT {int(args['number'])}"
        if args.get("offset"):
            limits += f" OFFSET {int(args['offset'])}"

    return {
        "fields": "t.*",
        "join": "",
        "where": where,
        "orderby": f"ORDER BY {orderby_column}" if orderby_column else "",
        "order": order,
        "limits": limits,
    }


def build_terms_query(
    host,
    taxonomies: List[str],
    args: Optional[Dict[str, Any]] = None,
    table_prefix: Optional[str] = None
) -> Tuple[str, List[Any]]:
    """
    Build the terms listing query.

    Args:
        host: AdminHost whose filters may rewrite the clauses
        taxonomies: Taxonomy names to list
        args: Query arguments (orderby, order, number, offset)
        table_prefix: Table name prefix (defaults to the host's)

    Returns:
        (sql, params) ready for a pymysql cursor
    """
    args = dict(args or {})
    if table_prefix is None:
        table_prefix = host.table_prefix

    # Let subscribers swap the requested orderby key first
    args["orderby"] = host.apply_filters("get_terms_orderby", args.get("orderby", "name"), args, taxonomies)

    clauses = base_clauses(taxonomies, args)
    clauses = host.apply_filters("terms_clauses", clauses, taxonomies, args)

    sql = f"SELECT {clauses['fields']} FROM {table_prefix}terms AS t"
    if clauses.get("join"):
        sql += f" {clauses['join'].strip()}"
    if clauses.get("where"):
        sql += f" WHERE {clauses['where']}"
    if clauses.get("orderby"):
        sql += f" {clauses['orderby']} {clauses.get('order', '')}".rstrip()
    if clauses.get("limits"):
        sql += f" {clauses['limits']}"

    return sql, list(taxonomies)
