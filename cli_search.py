"""Terminal client that reuses the in-process search logic."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Iterable, Optional

from furniture_search.catalog import Catalog, ElasticsearchCatalog, InMemoryCatalog
from furniture_search.es_client import get_client
from furniture_search.importer import load_catalog
from furniture_search.models import SearchResult
from furniture_search.search_service import SearchService

GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
RESET = "\033[0m"


def build_service(catalog_path: Optional[Path]) -> SearchService:
    catalog: Catalog
    if catalog_path is not None:
        data = load_catalog(catalog_path)
        catalog = InMemoryCatalog(data.products, data.categories, data.subcategories)
    else:
        catalog = ElasticsearchCatalog(get_client())
    return SearchService(catalog)


def perform_query(service: SearchService, query: str, page: int, page_size: Optional[int]) -> SearchResult:
    return asyncio.run(service.search(query, page, page_size))


def pretty_print_response(result: SearchResult) -> None:
    stage = result.stage.value if result.stage else "-"
    color = GREEN if stage == "strict" else YELLOW if stage == "relaxed" else RED
    intent = result.intent
    print(
        f"Query: {result.query!r} -> {result.normalized!r} | intent: {intent.primaryType or '-'} "
        f"({intent.confidence:.2f}) | stage: {color}{stage}{RESET} | "
        f"page {result.page}/{result.totalPages} | total: {result.total}"
    )
    if result.error:
        print(f"  {RED}{result.error}{RESET}")
    offset = (result.page - 1) * result.pageSize
    for idx, item in enumerate(result.products, start=offset + 1):
        score = item.get("searchScore")
        score_repr = f"{score:.2f}" if isinstance(score, (int, float)) else "-"
        intent_match = item.get("intentMatch")
        match_repr = f"{intent_match:+.1f}" if isinstance(intent_match, (int, float)) else "-"
        print(
            f"  {idx:02d}. score={score_repr} | {item.get('relevanceCategory') or '-'} | "
            f"intent={match_repr} | {item.get('name')}"
        )


def interactive_shell(service: SearchService, page_size: Optional[int]) -> None:
    print("Interactive furniture search. Type 'exit' to quit.")
    while True:
        try:
            query = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not query:
            continue
        if query.lower() in {"exit", "quit"}:
            return
        pretty_print_response(perform_query(service, query, 1, page_size))


def batch_mode(service: SearchService, file_path: Path, page_size: Optional[int]) -> None:
    with file_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            query = line.strip()
            if not query:
                continue
            pretty_print_response(perform_query(service, query, 1, page_size))


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the furniture search service")
    parser.add_argument("query", nargs="?", help="Query string. If omitted, starts REPL mode.")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    parser.add_argument("--catalog", type=Path, help="Search a local catalog JSON file instead of Elasticsearch")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--page-size", type=int, default=None)
    args = parser.parse_args(list(argv) if argv is not None else None)

    service = build_service(args.catalog)
    if args.batch:
        batch_mode(service, args.batch, args.page_size)
        return 0
    if args.query:
        pretty_print_response(perform_query(service, args.query, args.page, args.page_size))
        return 0
    interactive_shell(service, args.page_size)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
