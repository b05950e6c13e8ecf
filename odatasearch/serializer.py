""" Response Serializer: projected entities into an OData JSON response

The serializer is driven by the schema: every property is written according to its declared type.
A few things it does that a plain OData JSON writer would not:

* A property that is not declared (a dynamic field of the document) is written anyway:
  its descriptor is inferred from the value.
* A primitive response requires a context URL, unless the metadata level is `none`.
* With `odata.metadata=none`, the context URL, the metadata ETag, and operations are not written at all.
* A null primitive response is `{"@odata.null": true}`.

Example:

    serializer = ODataJsonSerializer(schema, metadata='minimal', service_root='http://localhost/odata/')
    result = serializer.entity_collection(entity_set, collection,
                                          context_url=ContextURL(entity_set.name, select=['title']),
                                          select=['title'])
    result.content  # '{"@odata.context": "http://localhost/odata/$metadata#Books(title)", "value": [...]}'
"""

import json
from typing import List, Optional, Sequence

from .exc import SerializerError
from .projector import Property, ComplexValue
from .schema import EdmProperty, EdmComplexType, PropertyKind, EDM_UNTYPED

METADATA_NONE = 'none'
METADATA_MINIMAL = 'minimal'
METADATA_FULL = 'full'

#: Null marker for primitive responses
JSON_NULL = '@odata.null'
JSON_CONTEXT = '@odata.context'
JSON_METADATA_ETAG = '@odata.metadataEtag'
JSON_COUNT = '@odata.count'
JSON_ID = '@odata.id'
JSON_TYPE = '@odata.type'
JSON_NAVIGATION_LINK = '@odata.navigationLink'
VALUE = 'value'

#: EDM primitive type => acceptable Python types
_PRIMITIVE_PYTHON_TYPES = {
    'Edm.String': (str,),
    'Edm.Boolean': (bool,),
    'Edm.Byte': (int,),
    'Edm.SByte': (int,),
    'Edm.Int16': (int,),
    'Edm.Int32': (int,),
    'Edm.Int64': (int,),
    'Edm.Single': (int, float),
    'Edm.Double': (int, float),
    'Edm.Decimal': (int, float),
    'Edm.Date': (str,),
    'Edm.DateTimeOffset': (str, int),  # epoch millis are fine too
    'Edm.TimeOfDay': (str,),
    'Edm.Duration': (str,),
    'Edm.Guid': (str,),
}


class ContextURL:
    """ The context URL: tells the client what the payload is

        * `$metadata#Books(title,year)`: a collection of books with the selected properties
        * `$metadata#Books/$entity`: a single book
        * `$metadata#Books('1')/title`: a property of the book '1'
    """

    def __init__(self, entity_set_name: str,
                 select: Sequence[str] = (),
                 key: Optional[str] = None,
                 property_name: Optional[str] = None,
                 single_entity: bool = False):
        self.entity_set_name = entity_set_name
        self.select = list(select or ())
        self.key = key
        self.property_name = property_name
        self.single_entity = single_entity

    def to_string(self, service_root: str = '', select_separator: str = ',') -> str:
        url = '{}$metadata#{}'.format(service_root, self.entity_set_name)
        if self.property_name:
            if self.key is not None:
                url += "('{}')".format(self.key)
            return url + '/' + self.property_name

        if self.select:
            url += '(' + select_separator.join(self.select) + ')'
        if self.single_entity:
            url += '/$entity'
        return url

    def __repr__(self):
        return 'ContextURL({!r})'.format(self.to_string())


class SerializerResult:
    """ Serialized response: the content, and its content type """

    __slots__ = ('content', 'content_type')

    def __init__(self, content: str, content_type: str):
        self.content = content
        self.content_type = content_type

    def __repr__(self):
        return 'SerializerResult({!r}, {!r})'.format(self.content_type, self.content)


class ODataJsonSerializer:
    """ OData JSON writer """

    def __init__(self, schema, metadata: str = METADATA_MINIMAL,
                 service_root: str = '',
                 select_separator: str = ',',
                 etag: Optional[str] = None):
        """ Init a serializer

        :param schema: The Entity Data Model
        :type schema: odatasearch.schema.EntityDataModel
        :param metadata: The `odata.metadata` level: 'none', 'minimal', 'full'
        :param service_root: Service root URL, prepended to context URLs
        :param select_separator: Separator for the select list in context URLs
        :param etag: Metadata ETag to write, if any
        """
        if metadata not in (METADATA_NONE, METADATA_MINIMAL, METADATA_FULL):
            raise ValueError(metadata)

        self.schema = schema
        self.metadata = metadata
        self.service_root = service_root
        self.select_separator = select_separator
        self.etag = etag

    @property
    def is_metadata_none(self) -> bool:
        return self.metadata == METADATA_NONE

    @property
    def is_metadata_full(self) -> bool:
        return self.metadata == METADATA_FULL

    @property
    def content_type(self) -> str:
        return 'application/json;odata.metadata={}'.format(self.metadata)

    # region Responses

    def entity_collection(self, entity_set, collection, context_url: ContextURL = None,
                          select: List[str] = None, expand: List[str] = None) -> SerializerResult:
        """ Serialize a collection of entities

        :type collection: odatasearch.projector.EntityCollection
        """
        doc = self._envelope(context_url)
        if collection.count is not None:
            doc[JSON_COUNT] = collection.count
        doc[VALUE] = [self._entity(entity_set, entity, select, expand)
                      for entity in collection]
        return self._result(doc)

    def entity(self, entity_set, entity, context_url: ContextURL = None,
               select: List[str] = None, expand: List[str] = None) -> SerializerResult:
        """ Serialize a single entity

        :type entity: odatasearch.projector.Entity
        """
        doc = self._envelope(context_url)
        doc.update(self._entity(entity_set, entity, select, expand))
        return self._result(doc)

    def primitive(self, property: Property, edm_property: EdmProperty = None,
                  context_url: ContextURL = None, operations=()) -> SerializerResult:
        """ Serialize a single primitive value

        :param property: The value
        :param edm_property: Its declared property; None to infer it from the value
        :param context_url: Required, unless the metadata level is 'none'
        :param operations: Operations to advertise (only with full metadata)
        :raises SerializerError: no context URL
        """
        if not self.is_metadata_none and context_url is None:
            raise SerializerError('ContextURL null!', SerializerError.NO_CONTEXT_URL)

        doc = self._envelope(context_url)
        doc.update(self._operations(operations))

        if property.is_null:
            doc[JSON_NULL] = True
        else:
            if edm_property is None:
                edm_property = infer_edm_property(property)
            doc[VALUE] = self._property_value(edm_property, property)
        return self._result(doc)

    # endregion

    # region Writers

    def _envelope(self, context_url: Optional[ContextURL]) -> dict:
        """ Context URL and metadata ETag; nothing at all with metadata=none """
        doc = {}
        if self.is_metadata_none:
            return doc
        if context_url is not None:
            doc[JSON_CONTEXT] = context_url.to_string(self.service_root, self.select_separator)
        if self.etag is not None:
            doc[JSON_METADATA_ETAG] = self.etag
        return doc

    def _operations(self, operations) -> dict:
        """ Operations are only advertised with full metadata """
        if not self.is_metadata_full:
            return {}
        return {op.metadata_anchor: {'title': op.title, 'target': op.target}
                for op in operations}

    def _entity(self, entity_set, entity, select: Optional[List[str]], expand: Optional[List[str]]) -> dict:
        entity_type = entity_set.entity_type
        doc = {}

        # Annotations
        if self.is_metadata_full:
            doc[JSON_ID] = entity.id
            doc[JSON_TYPE] = '#' + entity.type_name

        # Operations
        doc.update(self._operations(entity.operations))

        # Properties
        doc.update(self._properties(entity_type, entity.properties, select))

        # Navigation links, for everything that's not expanded
        if self.is_metadata_full:
            expanded = set(expand or ())
            for nav_name in entity_type.navigation_properties:
                if nav_name not in expanded:
                    doc[nav_name + JSON_NAVIGATION_LINK] = '{}/{}'.format(entity.id, nav_name)

        return doc

    def _properties(self, structured_type, properties: List[Property], select: Optional[List[str]]) -> dict:
        """ Write the properties of an entity or a complex value

            Properties missing from the type get a descriptor inferred from their value. So do untyped ones:
            values nested too deep to follow the declared type.
        """
        selected = set(select or ())
        doc = {}
        for prop in properties:
            if selected and prop.name not in selected:
                continue

            edm_property = structured_type.get_property(prop.name) if structured_type is not None else None
            if edm_property is None or prop.type_name == EDM_UNTYPED:
                edm_property = infer_edm_property(prop)
            doc[prop.name] = self._property_value(edm_property, prop)
        return doc

    def _property_value(self, edm_property: EdmProperty, prop: Property):
        """ Write a property value, checking it against its declared kind and type

        :raises SerializerError: kind mismatch, or a wrong primitive value
        """
        if edm_property.kind != prop.kind:
            raise SerializerError('Inconsistent property type!',
                                  SerializerError.INCONSISTENT_PROPERTY_TYPE, prop.name)

        if prop.value is None:
            if not edm_property.nullable:
                raise SerializerError('Wrong value for property!',
                                      SerializerError.WRONG_PROPERTY_VALUE, prop.name, 'null')
            return None

        kind = prop.kind
        if kind == PropertyKind.PRIMITIVE:
            return self._primitive_value(edm_property, prop.name, prop.value)
        elif kind == PropertyKind.COLLECTION_PRIMITIVE:
            return [self._primitive_value(edm_property, prop.name, v) for v in prop.value]
        elif kind == PropertyKind.COMPLEX:
            return self._complex_value(edm_property, prop.value)
        elif kind == PropertyKind.COLLECTION_COMPLEX:
            return [self._complex_value(edm_property, v) if v is not None else None
                    for v in prop.value]
        else:
            raise SerializerError('Unsupported property type: {}'.format(kind),
                                  SerializerError.UNSUPPORTED_PROPERTY_TYPE, prop.name)

    def _primitive_value(self, edm_property: EdmProperty, name: str, value):
        if value is None:
            return None

        # Untyped values are written as they are: that's how nested objects deeper than one level get through
        if edm_property.type_name == EDM_UNTYPED:
            return value

        # Objects can't be primitive values
        if isinstance(value, (dict, list)):
            raise SerializerError('Inconsistent property type!',
                                  SerializerError.INCONSISTENT_PROPERTY_TYPE, name)

        # Check the type; unknown EDM types take anything
        types = _PRIMITIVE_PYTHON_TYPES.get(edm_property.type_name)
        if types is not None:
            # bool is an int in Python, but not in EDM
            if not isinstance(value, types) or (isinstance(value, bool) and bool not in types):
                raise SerializerError('Wrong value for property!',
                                      SerializerError.WRONG_PROPERTY_VALUE, name, str(value))
        return value

    def _complex_value(self, edm_property: EdmProperty, value: ComplexValue) -> dict:
        if not isinstance(value, ComplexValue):
            raise SerializerError('Inconsistent property type!',
                                  SerializerError.INCONSISTENT_PROPERTY_TYPE, edm_property.name)
        return self._properties(edm_property.complex_type, value.properties, None)

    def _result(self, doc: dict) -> SerializerResult:
        return SerializerResult(json.dumps(doc), self.content_type)

    # endregion


def infer_edm_property(prop: Property) -> EdmProperty:
    """ Make up a property descriptor from a runtime value

        Used for the properties that the schema knows nothing about
    """
    if prop.kind in (PropertyKind.COMPLEX, PropertyKind.COLLECTION_COMPLEX):
        return EdmProperty(prop.name,
                           collection=prop.kind == PropertyKind.COLLECTION_COMPLEX,
                           complex_type=EdmComplexType(prop.name, ()))

    # Primitive collection: elements of different types are untyped
    if prop.kind == PropertyKind.COLLECTION_PRIMITIVE:
        type_names = {infer_edm_type_name(v) for v in prop.value or () if v is not None}
        type_name = type_names.pop() if len(type_names) == 1 else EDM_UNTYPED
        return EdmProperty(prop.name, prop.type_name or type_name, collection=True)

    return EdmProperty(prop.name, prop.type_name or infer_edm_type_name(prop.value))


def infer_edm_type_name(value) -> str:
    """ Get the EDM type name for a Python value """
    if isinstance(value, (dict, list)):
        return EDM_UNTYPED
    elif isinstance(value, bool):
        return 'Edm.Boolean'
    elif isinstance(value, int):
        return 'Edm.Int64'
    elif isinstance(value, float):
        return 'Edm.Double'
    else:
        return 'Edm.String'
