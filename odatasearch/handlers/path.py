"""
### Resource Path

The resource path tells which entities the API user wants:

```
GET /Books                      all books
GET /Books('1')                 one book
GET /Authors('1')/books         books of the author '1'
GET /Books('1')/author          the author of the book '1'
GET /Books('1')/title           the title of the book '1'
```

The search engine has no idea of navigation: documents of different types only know about each other through
parent/child joins. Therefore, every navigation step is converted into a join query:

* A to-many navigation (`Authors/books`): the author is the parent of the books.
  Books are found with `has_parent(parent_type=Author, ...)`.
* A to-one navigation (`Books/author`): the book is the child of the author.
  The author is found with `has_child(type=Book, ...)`.

Key predicates restrict the documents of their segment by id; the restriction travels through the joins.

Composite keys are not supported: every segment has at most one key.
A primitive property can only be the last segment; it selects a single value of the entity before it.
"""

from .base import ODataQueryHandlerBase
from ..dsl import ComposedQuery
from ..exc import InvalidQueryError, UnsupportedRequestError
from ..schema import PropertyKind
from ..uri import UriResourceKind


class ResourcePathHandler(ODataQueryHandlerBase):
    """ Resource path handler: builds the join query and finds the entity set to respond with

        Input: a list of `UriResource` segments.

        After input():
        * `root_entity_set`: the entity set the path starts with
        * `entity_set`: the entity set the response rows belong to
        * `composed_query`: the frozen ComposedQuery
        * `property`: the trailing primitive property, or None
        * `keys`: key values of the last traversed segment
    """

    query_option_name = 'path'

    def __init__(self, entity_set, schema, type_field=None):
        """ Init the resource path handler

        :param entity_set: Not known yet: the path will tell. Give None.
        :param schema: The Entity Data Model
        :param type_field: Name of the document field that holds the document type (the join field).
            When set, the search is restricted to documents of the response type:
            this is required when documents of different types share an index.
        """
        super(ResourcePathHandler, self).__init__(entity_set, schema)

        # Settings
        self.type_field = type_field

        # On input
        self.segments = None
        self.root_entity_set = None
        self.composed_query = None
        self.property = None
        self.keys = None

    def input(self, segments):
        super(ResourcePathHandler, self).input(segments)
        self.segments = segments = list(segments or ())

        # Validate: must start with an entity set
        if not segments:
            raise InvalidQueryError('Resource path is empty')
        if segments[0].kind != UriResourceKind.ENTITY_SET:
            raise UnsupportedRequestError('Only EntitySet is supported')

        # A trailing primitive property selects a value from the entity before it.
        # It does not take part in the joins.
        traversed = segments
        if len(segments) > 1 and segments[-1].kind == UriResourceKind.PRIMITIVE_PROPERTY:
            traversed = segments[:-1]

        # Walk the path, resolve entity sets
        resolved = self._resolve_segments(traversed)
        self.root_entity_set = resolved[0][1]
        self.entity_set = resolved[-1][1]

        # Trailing property
        if traversed is not segments:
            self.property = self._resolve_property(segments[-1])

        # Build the query
        self.composed_query = self._build_query(resolved)
        return self

    def _resolve_segments(self, segments):
        """ Resolve the entity set of every segment

        :return: list of (segment, entity set, navigation property | None)
        :raises UnsupportedRequestError: unsupported segment kind
        """
        resolved = []
        entity_set = None
        for i, segment in enumerate(segments):
            navigation = None
            if segment.kind == UriResourceKind.ENTITY_SET and i == 0:
                entity_set = self.schema.get_entity_set(segment.name)
            elif segment.kind == UriResourceKind.NAVIGATION_PROPERTY:
                navigation = self.schema.get_navigation_property(entity_set.entity_type, segment.name,
                                                                 self.query_option_name)
                entity_set = self.schema.get_navigation_target(entity_set, navigation)
            else:
                raise UnsupportedRequestError('Not supported: {} segment "{}"'.format(segment.kind, segment.name))
            resolved.append((segment, entity_set, navigation))
        return resolved

    def _resolve_property(self, segment):
        """ Resolve the trailing primitive property """
        prop = self.schema.get_property(self.entity_type, segment.name, self.query_option_name)
        if prop.kind != PropertyKind.PRIMITIVE:
            raise UnsupportedRequestError('Not supported: {} property "{}"'.format(prop.kind, prop.name))
        return prop

    def _build_query(self, resolved):
        """ Build a ComposedQuery for the resolved path

            Every segment restricts its own type by its key.
            Every segment but the last one is also joined to the next one:
            to-many navigation means we're the parent; to-one means we're the child.
        """
        query = ComposedQuery()
        last = len(resolved) - 1
        for i, (segment, entity_set, navigation) in enumerate(resolved):
            ids = self.collect_ids(segment)
            if i < last:
                next_navigation = resolved[i + 1][2]
                if next_navigation.collection:
                    query.add_parent_query(entity_set.doc_type, ids)
                else:
                    query.add_child_query(entity_set.doc_type, ids)
            else:
                query.add_ids_query(entity_set.doc_type, ids)
                self.keys = ids

        # Tag it with the target
        return query.freeze(self.entity_set.index, self.entity_set.doc_type)

    @staticmethod
    def collect_ids(segment):
        """ Get key values from a segment

        :raises UnsupportedRequestError: composite keys
        """
        if len(segment.key_predicates) > 1:
            raise UnsupportedRequestError('Composite Keys are not supported')
        return [unquote(key.text) for key in segment.key_predicates]

    @property
    def is_single_entity(self):
        """ Does the path address one entity (a key on the last segment, and no property)? """
        return bool(self.keys) and self.property is None

    @property
    def is_primitive(self):
        """ Does the path address a primitive property? """
        return self.property is not None

    def alter_request(self, request):
        request.index = self.composed_query.index
        request.doc_type = self.composed_query.doc_type
        request.type_field = self.type_field
        request.query = self.composed_query.compile()
        return request

    def get_final_input_value(self):
        return '/'.join(map(repr, self.segments))


def unquote(text: str) -> str:
    """ Strip the surrounding quotes from a key literal: "'1'" -> '1' """
    if len(text) >= 2 and text[0] == text[-1] == "'":
        return text[1:-1].replace("''", "'")
    return text
