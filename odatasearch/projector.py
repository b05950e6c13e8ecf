""" Result Projector: raw documents into typed entities

The search engine returns documents as plain field maps. The projector turns them into entities the serializer can
write: every field becomes a property, named by the schema, and typed by its value:

* a list becomes a collection: of complex values when the property is declared complex,
  or when it's undeclared and every element is an object; of primitive values otherwise.
  Null elements of a complex collection stay null
* an object becomes a complex value. Its entries become primitive sub-properties: only one level of nesting
  is materialized, deeper values (objects, lists) are carried as they are, typed as `Edm.Untyped`
* anything else is a primitive value

Fields that are not declared in the schema are kept under their own names: they're dynamic properties.
"""

from typing import List, Optional

from .exc import NotFoundError, SerializerError
from .schema import PropertyKind, EdmProperty, EDM_UNTYPED


class Property:
    """ A projected property: name, kind, value, and the EDM type name (None when unknown) """

    __slots__ = ('name', 'kind', 'value', 'type_name')

    def __init__(self, name: str, kind: str, value, type_name: Optional[str] = None):
        self.name = name
        self.kind = kind
        self.value = value
        self.type_name = type_name

    @property
    def is_null(self) -> bool:
        return self.value is None

    @property
    def is_collection(self) -> bool:
        return self.kind in (PropertyKind.COLLECTION_PRIMITIVE, PropertyKind.COLLECTION_COMPLEX)

    def __repr__(self):
        return 'Property({!r}, {}, {!r})'.format(self.name, self.kind, self.value)


class ComplexValue:
    """ A value of a complex property: a list of sub-properties """

    __slots__ = ('properties',)

    def __init__(self, properties: List[Property]):
        self.properties = properties

    def __repr__(self):
        return 'ComplexValue({!r})'.format(self.properties)


class Operation:
    """ An action or function bound to an entity, advertised with full metadata """

    __slots__ = ('metadata_anchor', 'title', 'target')

    def __init__(self, metadata_anchor: str, title: str, target: str):
        self.metadata_anchor = metadata_anchor
        self.title = title
        self.target = target

    def __repr__(self):
        return 'Operation({!r})'.format(self.metadata_anchor)


class Entity:
    """ A projected entity

        `id` is the entity id: `Books('1')`
    """

    def __init__(self, id: str, type_name: str, properties: List[Property] = None, operations: List[Operation] = None):
        self.id = id
        self.type_name = type_name
        self.properties = properties or []
        self.operations = operations or []

    def get_property(self, name: str) -> Optional[Property]:
        for p in self.properties:
            if p.name == name:
                return p
        return None

    def __repr__(self):
        return 'Entity({!r}, {!r})'.format(self.id, self.properties)


class EntityCollection:
    """ A list of projected entities; `count` is the total number of matches, when requested """

    def __init__(self, entities: List[Entity] = None, count: Optional[int] = None):
        self.entities = entities or []
        self.count = count

    def __len__(self):
        return len(self.entities)

    def __iter__(self):
        return iter(self.entities)

    def __repr__(self):
        return 'EntityCollection(count={}, {!r})'.format(self.count, self.entities)


def entity_id(entity_set_name: str, id: str) -> str:
    """ Make an entity id: Books('1') """
    return "{}('{}')".format(entity_set_name, id)


class ResultProjector:
    """ Projects search results onto the schema """

    def __init__(self, schema):
        """
        :type schema: odatasearch.schema.EntityDataModel
        """
        self.schema = schema

    def project_collection(self, entity_set, result, count: bool = False) -> EntityCollection:
        """ Project every hit into an entity

        :param entity_set: The entity set the hits belong to
        :param result: The search result
        :type result: odatasearch.search.SearchResult
        :param count: Was the total count requested?
        """
        return EntityCollection([self.project_hit(entity_set, hit) for hit in result.hits],
                                count=result.total if count else None)

    def project_entity(self, entity_set, result) -> Entity:
        """ Project the first hit into an entity

        :raises NotFoundError: no hits
        """
        if not result.hits:
            raise NotFoundError('Entity not found in "{}"'.format(entity_set.name))
        return self.project_hit(entity_set, result.hits[0])

    def project_scalar(self, entity_set, result) -> Property:
        """ Project the first hit into the single property that was fetched

            An empty document means that the identifier was requested: it's not a part of the document.

        :raises NotFoundError: no hits
        """
        if not result.hits:
            raise NotFoundError('Entity not found in "{}"'.format(entity_set.name))
        hit = result.hits[0]
        entity_type = entity_set.entity_type

        # Identifier
        if not hit.source:
            key = entity_type.key_property
            return Property(key.name, PropertyKind.PRIMITIVE, hit.id, key.type_name)

        # The only field
        field, value = next(iter(hit.source.items()))
        return self.materialize(field, value, entity_type.find_property_by_field(field))

    def project_hit(self, entity_set, hit) -> Entity:
        """ Project a single hit into an entity: the identifier first, then fields in document order """
        entity_type = entity_set.entity_type
        key = entity_type.key_property

        properties = [Property(key.name, PropertyKind.PRIMITIVE, hit.id, key.type_name)]
        for field, value in hit.source.items():
            prop = entity_type.find_property_by_field(field)
            if prop is key:
                continue  # already there
            properties.append(self.materialize(field, value, prop))

        return Entity(entity_id(entity_set.name, hit.id), entity_type.full_name, properties)

    def materialize(self, field: str, value, prop: Optional[EdmProperty]) -> Property:
        """ Turn a field value into a property

        :param field: Document field name
        :param value: Field value
        :param prop: The declared property, or None for dynamic fields
        :raises SerializerError: a complex collection has an element that is neither an object nor null
        """
        name = prop.name if prop is not None else field
        type_name = prop.type_name if prop is not None else None

        # Null: the declared kind, if any
        if value is None:
            return Property(name, prop.kind if prop is not None else PropertyKind.PRIMITIVE, None, type_name)

        # A single value of a collection field
        if prop is not None and prop.collection and not isinstance(value, list):
            value = [value]

        # Collection
        if isinstance(value, list):
            if prop is not None:
                is_complex = prop.is_complex
            else:
                is_complex = bool(value) and all(isinstance(v, dict) for v in value)

            if not is_complex:
                return Property(name, PropertyKind.COLLECTION_PRIMITIVE, list(value), type_name)

            for v in value:
                if v is not None and not isinstance(v, dict):
                    raise SerializerError('Inconsistent property type!',
                                          SerializerError.INCONSISTENT_PROPERTY_TYPE, name)
            return Property(name, PropertyKind.COLLECTION_COMPLEX,
                            [self._complex_value(v, prop) if v is not None else None for v in value],
                            type_name)

        # Complex
        if isinstance(value, dict):
            return Property(name, PropertyKind.COMPLEX, self._complex_value(value, prop), type_name)

        # Primitive
        return Property(name, PropertyKind.PRIMITIVE, value, type_name)

    def _complex_value(self, value: dict, prop: Optional[EdmProperty]) -> ComplexValue:
        """ Materialize one level of an object: its entries are primitive sub-properties

            Objects and lists found at this level, and sub-properties declared complex or collection,
            are carried as they are: they're untyped.
        """
        complex_type = prop.complex_type if prop is not None else None

        properties = []
        for field, sub_value in value.items():
            sub_prop = complex_type.find_property_by_field(field) if complex_type is not None else None

            if isinstance(sub_value, (dict, list)) or (sub_prop is not None and sub_prop.kind != PropertyKind.PRIMITIVE):
                type_name = EDM_UNTYPED
            else:
                type_name = sub_prop.type_name if sub_prop is not None else None

            properties.append(Property(sub_prop.name if sub_prop is not None else field,
                                       PropertyKind.PRIMITIVE, sub_value, type_name))
        return ComplexValue(properties)
