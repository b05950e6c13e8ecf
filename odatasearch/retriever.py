""" Compile and execute: one OData request, from the parsed resource path to the serialized response

    retriever = DataRetriever(schema, Elasticsearch('http://localhost:9200'),
                              service_root='http://localhost/odata/')
    result = retriever.retrieve([EntitySetSegment('Books')], select=['title'], top=10)
    result.content, result.content_type

Every failure is raised as an `odatasearch.exc` exception with an HTTP `status_code`.
"""

import logging

from .projector import ResultProjector
from .query import ODataQuery
from .search import SearchExecutor
from .serializer import ODataJsonSerializer, ContextURL, METADATA_MINIMAL

logger = logging.getLogger(__name__)


class DataRetriever:
    """ Compile a request into a search, run it, project the hits, and serialize them """

    def __init__(self, schema, client, service_root: str = '', metadata: str = METADATA_MINIMAL,
                 etag: str = None, handler_settings=None, select_separator: str = ',',
                 operations=None):
        """ Init a data retriever

        :param schema: The Entity Data Model
        :type schema: odatasearch.schema.EntityDataModel
        :param client: The search engine client
        :type client: elasticsearch.Elasticsearch
        :param service_root: Service root URL, for context URLs
        :param metadata: The `odata.metadata` level: 'none', 'minimal', 'full'
        :param etag: The metadata ETag
        :param handler_settings: ODataQuery settings
        :type handler_settings: dict | odatasearch.ODataQuerySettingsDict | None
        :param select_separator: Separator for the select list in context URLs
        :param operations: A callable that lists the operations bound to an entity: `(entity_set, entity) -> [Operation]`.
            They are advertised with full metadata. Default: no operations
        :type operations: callable | None
        """
        self.schema = schema
        self.handler_settings = handler_settings
        self.operations = operations
        self.executor = SearchExecutor(client)
        self.projector = ResultProjector(schema)
        self.serializer = ODataJsonSerializer(schema, metadata=metadata,
                                              service_root=service_root,
                                              select_separator=select_separator,
                                              etag=etag)

    def query(self, path, **query_options) -> ODataQuery:
        """ Compile the request

        :rtype: ODataQuery
        """
        return ODataQuery(self.schema, self.handler_settings).query(path, **query_options)

    def retrieve(self, path, **query_options):
        """ Handle a request

        :param path: The resource path: a list of `odatasearch.uri.UriResource`
        :param query_options: filter, select, expand, orderby, top, skip, count. See `ODataQuery.query()`
        :rtype: odatasearch.serializer.SerializerResult
        :raises odatasearch.exc.BaseODataSearchException
        """
        oq = self.query(path, **query_options)
        result = self.executor.execute(oq.end())
        entity_set = oq.entity_set

        # Single value
        if oq.result_is_scalar():
            prop = self.projector.project_scalar(entity_set, result)
            return self.serializer.primitive(
                prop,
                entity_set.entity_type.get_property(prop.name),
                context_url=ContextURL(entity_set.name,
                                       key=oq.handler_path.keys[0] if oq.handler_path.keys else None,
                                       property_name=oq.handler_path.property.name),
            )

        select = oq.get_select_list()
        expand = oq.get_expand_list()

        # Single entity
        if oq.result_is_single_entity():
            entity = self.projector.project_entity(entity_set, result)
            self._bind_operations(entity_set, [entity])
            return self.serializer.entity(entity_set, entity,
                                          context_url=ContextURL(entity_set.name, select, single_entity=True),
                                          select=select, expand=expand)

        # Collection
        collection = self.projector.project_collection(entity_set, result, count=oq.result_is_counted())
        self._bind_operations(entity_set, collection)
        logger.debug('Retrieved %d entities from %s', len(collection), entity_set.name)
        return self.serializer.entity_collection(entity_set, collection,
                                                 context_url=ContextURL(entity_set.name, select),
                                                 select=select, expand=expand)

    def _bind_operations(self, entity_set, entities):
        """ Fill in the operations of every entity """
        if self.operations is None:
            return
        for entity in entities:
            entity.operations = list(self.operations(entity_set, entity) or ())
