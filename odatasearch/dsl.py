""" Elasticsearch Query DSL nodes

Queries are plain dicts, exactly as the search engine expects them in the `query` argument.
These helpers build them, so that the rest of the code never has to remember the exact nesting.
"""

from typing import Iterable, List, Optional


def match_all() -> dict:
    return {'match_all': {}}


def ids(values: Iterable[str]) -> dict:
    """ Restrict to documents with the given ids """
    return {'ids': {'values': [str(v) for v in values]}}


def term(field: str, value) -> dict:
    return {'term': {field: value}}


def exists(field: str) -> dict:
    return {'exists': {'field': field}}


def range_(field: str, op: str, value) -> dict:
    """ Range query. `op`: 'gt', 'gte', 'lt', 'lte' """
    return {'range': {field: {op: value}}}


def prefix(field: str, value: str) -> dict:
    return {'prefix': {field: value}}


def wildcard(field: str, pattern: str) -> dict:
    return {'wildcard': {field: pattern}}


def escape_wildcard(value: str) -> str:
    """ Escape the special characters of a wildcard pattern """
    return value.replace('\\', '\\\\').replace('*', '\\*').replace('?', '\\?')


def has_parent(parent_type: str, query: dict) -> dict:
    """ Documents whose parent document (of `parent_type`) matches the query """
    return {'has_parent': {'parent_type': parent_type, 'query': query}}


def has_child(child_type: str, query: dict) -> dict:
    """ Documents that have a child document (of `child_type`) that matches the query """
    return {'has_child': {'type': child_type, 'query': query}}


def and_(*queries: dict) -> dict:
    return {'bool': {'filter': list(queries)}}


def or_(*queries: dict) -> dict:
    return {'bool': {'should': list(queries), 'minimum_should_match': 1}}


def not_(query: dict) -> dict:
    return {'bool': {'must_not': [query]}}


def anded_together(queries: List[Optional[dict]]) -> dict:
    """ Take a list of queries and AND them together

        `None`s are skipped. No queries: match everything.
    """
    queries = [q for q in queries if q is not None]

    # No queries: match all
    if not queries:
        return match_all()

    # One query: use as is
    if len(queries) == 1:
        return queries[0]

    # AND them together
    return and_(*queries)


class ComposedQuery:
    """ The query built from a resource path: joins and id restrictions

        The query is accumulated while walking the path left to right.
        At every moment, the accumulated query restricts documents of the current type.
        A join wraps it, and the result restricts documents of the next type:

            Authors('1')/books
            -> has_parent(parent_type=Author, query=ids(['1']))

        Once the path is walked, the query is tagged with the index and the document type of the last
        segment, and frozen.
    """

    def __init__(self):
        #: The accumulated query, or None when there are no restrictions
        self.query = None  # type: dict | None

        #: The steps, in order: ('ids' | 'parent' | 'child', type, ids)
        self.steps = []

        #: The index and the document type of the entities the query finds
        self.index = None
        self.doc_type = None

        # Frozen?
        self._frozen = False

    def _step(self, kind: str, doc_type: str, ids_: List[str]):
        assert not self._frozen, 'ComposedQuery is frozen'
        self.steps.append((kind, doc_type, tuple(ids_)))

    def _query_with_ids(self, ids_: List[str]) -> Optional[dict]:
        """ The accumulated query, restricted to the given ids """
        return anded_together([self.query, ids(ids_) if ids_ else None]) \
            if self.query is not None or ids_ \
            else None

    def add_ids_query(self, doc_type: str, ids_: List[str]) -> 'ComposedQuery':
        """ Restrict the current type to the given ids (if any) """
        self._step('ids', doc_type, ids_)
        self.query = self._query_with_ids(ids_)
        return self

    def add_parent_query(self, doc_type: str, ids_: List[str]) -> 'ComposedQuery':
        """ The current type is the parent of the next one: find children of the matching parents """
        self._step('parent', doc_type, ids_)
        self.query = has_parent(doc_type, self._query_with_ids(ids_) or match_all())
        return self

    def add_child_query(self, doc_type: str, ids_: List[str]) -> 'ComposedQuery':
        """ The current type is the child of the next one: find parents of the matching children """
        self._step('child', doc_type, ids_)
        self.query = has_child(doc_type, self._query_with_ids(ids_) or match_all())
        return self

    def freeze(self, index: str, doc_type: str) -> 'ComposedQuery':
        """ Tag the query with the index and document type to search, and make it immutable """
        self.index = index
        self.doc_type = doc_type
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def compile(self) -> dict:
        """ Get the query; match_all() when there are no restrictions """
        return self.query if self.query is not None else match_all()

    def __repr__(self):
        return '{}({}: {!r})'.format(self.__class__.__name__, self.doc_type, self.steps)
