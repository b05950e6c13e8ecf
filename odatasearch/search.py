""" Search Executor: one search call, and its result

`ODataQuery.end()` gives you a `SearchRequest`: everything the search engine has to know.
`SearchExecutor` runs it with an `elasticsearch.Elasticsearch` client, and gives you a `SearchResult`:

    executor = SearchExecutor.from_hosts(['http://localhost:9200'])
    result = executor.execute(ODataQuery(schema).query(path=...).end())
    for hit in result.hits:
        print(hit.id, hit.source)

No retries, no timeouts: any failure is fatal to the request, and is raised as `SearchExecutionError`.
"""

import logging
from typing import List, Optional

from elasticsearch import ApiError, Elasticsearch, TransportError

from . import dsl
from .exc import SearchExecutionError

logger = logging.getLogger(__name__)


class SearchRequest:
    """ A search request, as built by query option handlers

        Every handler fills in its part with `alter_request()`.
    """

    def __init__(self):
        #: Index to search, and the type of documents to find
        self.index = None  # type: str
        self.doc_type = None  # type: str

        #: Name of the join field that holds the document type; None to not restrict by type
        self.type_field = None  # type: Optional[str]

        #: The composed path query (joins and ids), and the compiled filter
        self.query = None  # type: dict
        self.filter = None  # type: Optional[dict]

        #: Sort: [{field: 'asc' | 'desc'}]
        self.sort = None  # type: Optional[List[dict]]

        #: Pagination
        self.from_ = None  # type: Optional[int]
        self.size = None  # type: Optional[int]

        #: Fields to fetch; None for all
        self.source = None  # type: Optional[List[str]]

        #: Count all the matching documents precisely?
        self.track_total_hits = False

    def compile_query(self) -> dict:
        """ The effective query: the path query AND the filter (or match_all)

            When `type_field` is set, documents are restricted to `doc_type` as well.
        """
        queries = [
            self.query if self.query is not None else dsl.match_all(),
            self.filter if self.filter is not None else dsl.match_all(),
        ]
        if self.type_field:
            queries.append(dsl.term(self.type_field, self.doc_type))
        return dsl.and_(*queries)

    def to_kwargs(self) -> dict:
        """ Get the kwargs for `Elasticsearch.search()` """
        kwargs = dict(index=self.index, query=self.compile_query())
        if self.sort:
            kwargs['sort'] = self.sort
        if self.from_ is not None:
            kwargs['from_'] = self.from_
        if self.size is not None:
            kwargs['size'] = self.size
        if self.source is not None:
            kwargs['source'] = self.source
        if self.track_total_hits:
            kwargs['track_total_hits'] = True
        return kwargs

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self.to_kwargs())


class RawHit:
    """ A matching document: its id, and the fields that were fetched """

    __slots__ = ('id', 'source')

    def __init__(self, id: str, source: dict = None):
        self.id = id
        self.source = source or {}

    def __repr__(self):
        return 'RawHit({!r}, {!r})'.format(self.id, self.source)


class SearchResult:
    """ The result of a search: hits, in order, and the total number of matching documents """

    def __init__(self, hits: List[RawHit], total: Optional[int] = None):
        self.hits = hits
        self.total = total

    @classmethod
    def from_response(cls, response) -> 'SearchResult':
        """ Read a search engine response

            :param response: the response body: a dict, or an `ObjectApiResponse`
        """
        body = getattr(response, 'body', response)
        hits_block = body.get('hits', {})

        # hits.total is {'value': n, 'relation': 'eq'}, or just a number
        total = hits_block.get('total', None)
        if isinstance(total, dict):
            total = total.get('value', None)

        hits = [RawHit(hit.get('_id'), hit.get('_source', {}))
                for hit in hits_block.get('hits', [])]
        return cls(hits, total)

    def __len__(self):
        return len(self.hits)

    def __iter__(self):
        return iter(self.hits)

    def __repr__(self):
        return '{}(total={}, hits={!r})'.format(self.__class__.__name__, self.total, self.hits)


class SearchExecutor:
    """ Runs search requests with an `elasticsearch.Elasticsearch` client

        The client is thread-safe, so one executor can be shared by all requests.
    """

    def __init__(self, client: Elasticsearch):
        self.client = client

    @classmethod
    def from_hosts(cls, hosts, **kwargs) -> 'SearchExecutor':
        """ Create an executor with a new client

            :param hosts: Search engine node URLs
            :param kwargs: Other arguments for `Elasticsearch()`
        """
        return cls(Elasticsearch(hosts, **kwargs))

    def execute(self, request: SearchRequest) -> SearchResult:
        """ Run the search request

            :raises SearchExecutionError: the search engine has failed
        """
        kwargs = request.to_kwargs()
        logger.debug('Search request: %r', kwargs)

        try:
            response = self.client.search(**kwargs)
        except (ApiError, TransportError) as e:
            raise SearchExecutionError('Search on "{}" has failed: {}'.format(request.index, e)) from e

        result = SearchResult.from_response(response)
        logger.debug('Search on %s: %d hits, %s total', request.index, len(result.hits), result.total)
        return result
