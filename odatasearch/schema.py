""" Entity Data Model: the read-only schema that every handler works against

odatasearch needs a lot of information about your entity types: which document field backs a property,
whether it's a collection, whether filtering needs the exact-match `.keyword` sub-field, where a navigation
property leads. All of this is kept in an `EntityDataModel`, which is an immutable snapshot: you build it once,
and then give it to every `ODataQuery`.

Example:

    schema = EntityDataModel('Library',
        entity_types=[
            EdmEntityType('Author', [
                EdmProperty('name', 'Edm.String', keyword=True),
            ], navigation_properties=[
                EdmNavigationProperty('books', 'Book', collection=True),
            ]),
            EdmEntityType('Book', [
                EdmProperty('title', 'Edm.String', keyword=True),
                EdmProperty('tags', 'Edm.String', collection=True),
            ], navigation_properties=[
                EdmNavigationProperty('author', 'Author'),
            ]),
        ],
        entity_sets=[
            EdmEntitySet('Authors', 'Author', index='library'),
            EdmEntitySet('Books', 'Book', index='library'),
        ])
"""

from collections import OrderedDict
from copy import copy
from typing import Iterable, List, Mapping, Optional, FrozenSet

from .exc import InvalidPropertyError, InvalidNavigationError, NotFoundError


#: Name of the document field that holds the document id
ID_FIELD_NAME = '_id'

#: Type name for values of unknown shape
EDM_UNTYPED = 'Edm.Untyped'


class PropertyKind:
    """ The kind of value a property holds """
    PRIMITIVE = 'primitive'
    COMPLEX = 'complex'
    COLLECTION_PRIMITIVE = 'collection-of-primitive'
    COLLECTION_COMPLEX = 'collection-of-complex'


class EdmProperty:
    """ A structural property of an entity type (or of a complex type)

        A property has a declared name (the one the API user sees), and a `field`: the name of the document field
        that backs it. They are the same unless you say otherwise.
    """

    __slots__ = ('name', '_type_name', 'field', 'collection', 'complex_type', 'keyword', 'nullable')

    def __init__(self, name: str, type_name: str = 'Edm.String',
                 field: str = None,
                 collection: bool = False,
                 complex_type: 'EdmComplexType' = None,
                 keyword: bool = False,
                 nullable: bool = True):
        """ Define a property

        :param name: Property name
        :param type_name: EDM type name: 'Edm.String', 'Edm.Int32', ..., or the complex type name
        :param field: Name of the backing document field. Default: same as `name`
        :param collection: Is it a collection of values?
        :param complex_type: The complex type, for complex properties
        :param keyword: Is it an analyzed text field that has an exact-match `.keyword` sub-field?
            Filtering and sorting will use the sub-field.
        :param nullable: Can the value be absent?
        """
        self.name = name
        self.field = field or name
        self.collection = collection
        self.complex_type = complex_type
        self._type_name = type_name
        self.keyword = keyword
        self.nullable = nullable

    @property
    def type_name(self) -> str:
        """ EDM type name; for complex properties, the qualified complex type name """
        return self.complex_type.full_name if self.complex_type is not None else self._type_name

    @property
    def kind(self) -> str:
        if self.complex_type is not None:
            return PropertyKind.COLLECTION_COMPLEX if self.collection else PropertyKind.COMPLEX
        else:
            return PropertyKind.COLLECTION_PRIMITIVE if self.collection else PropertyKind.PRIMITIVE

    @property
    def is_primitive(self) -> bool:
        return self.complex_type is None

    @property
    def is_complex(self) -> bool:
        return self.complex_type is not None

    @property
    def is_id(self) -> bool:
        return self.field == ID_FIELD_NAME

    def _bound(self, complex_types: Mapping['EdmComplexType', 'EdmComplexType']) -> 'EdmProperty':
        """ Get the property with its complex type replaced by the model's copy of it """
        if self.complex_type is None:
            return self
        prop = copy(self)
        prop.complex_type = complex_types[self.complex_type]
        return prop

    def __repr__(self):
        return '{}({!r}, {!r})'.format(self.__class__.__name__, self.name, self.type_name)


class EdmNavigationProperty:
    """ A relationship from one entity type to another """

    __slots__ = ('name', 'target', 'collection')

    def __init__(self, name: str, target: str, collection: bool = False):
        """ Define a navigation property

        :param name: Navigation property name
        :param target: Target entity type name
        :param collection: To-many? (`False` means to-one)
        """
        self.name = name
        self.target = target
        self.collection = collection

    def __repr__(self):
        return '{}({!r} -> {}{})'.format(self.__class__.__name__, self.name,
                                         self.target, '[]' if self.collection else '')


class _StructuredType:
    """ Base for types that have structural properties """

    def __init__(self, name: str, properties: Iterable[EdmProperty], namespace: str = None):
        self.name = name
        self.namespace = namespace
        self._properties = OrderedDict((p.name, p) for p in properties)
        self._properties_by_field = {p.field: p for p in self._properties.values()}

    @property
    def full_name(self) -> str:
        """ Namespace-qualified name """
        return '{}.{}'.format(self.namespace, self.name) if self.namespace else self.name

    @property
    def properties(self) -> Mapping[str, EdmProperty]:
        return self._properties

    @property
    def property_names(self) -> FrozenSet[str]:
        return frozenset(self._properties.keys())

    def get_property(self, name: str) -> Optional[EdmProperty]:
        """ Get a property by its declared name, or None """
        return self._properties.get(name)

    def find_property_by_field(self, field: str) -> Optional[EdmProperty]:
        """ Get a property by the name of its backing document field, or None """
        return self._properties_by_field.get(field)

    def get_invalid_names(self, names: Iterable[str]) -> set:
        """ Get the names that are not declared properties """
        return set(names) - self.property_names

    def _copy_into(self, namespace: str):
        """ Copy the type into a model's namespace. The namespace it was declared with, if any, wins """
        t = copy(self)
        t.namespace = self.namespace or namespace
        return t

    def _bind_properties(self, complex_types: Mapping['EdmComplexType', 'EdmComplexType']):
        """ Point complex properties to the model's copies of their complex types

            :param complex_types: {complex type: the model's copy}
        """
        self._properties = OrderedDict((name, p._bound(complex_types))
                                       for name, p in self._properties.items())
        self._properties_by_field = {p.field: p for p in self._properties.values()}

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self.full_name)


class EdmComplexType(_StructuredType):
    """ A nested object type: a named set of properties without an identity """


class EdmEntityType(_StructuredType):
    """ An entity type: properties, plus navigation properties

        Every entity type has an identifier property backed by the document id.
        If you don't declare one, a string property named '_id' is added.
    """

    def __init__(self, name: str,
                 properties: Iterable[EdmProperty] = (),
                 navigation_properties: Iterable[EdmNavigationProperty] = (),
                 namespace: str = None):
        properties = list(properties)
        if not any(p.field == ID_FIELD_NAME for p in properties):
            properties.insert(0, EdmProperty(ID_FIELD_NAME, 'Edm.String', nullable=False))
        super(EdmEntityType, self).__init__(name, properties, namespace)

        self._navigation_properties = OrderedDict((n.name, n) for n in navigation_properties)

    @property
    def key_property(self) -> EdmProperty:
        """ The identifier property """
        return self._properties_by_field[ID_FIELD_NAME]

    @property
    def navigation_properties(self) -> Mapping[str, EdmNavigationProperty]:
        return self._navigation_properties

    def get_navigation_property(self, name: str) -> Optional[EdmNavigationProperty]:
        return self._navigation_properties.get(name)


class EdmEntitySet:
    """ A named, queryable collection of entities, bound to an index and a document type """

    __slots__ = ('name', 'entity_type', 'index', 'doc_type', 'navigation_bindings')

    def __init__(self, name: str, entity_type, index: str = None, doc_type: str = None,
                 navigation_bindings: Mapping[str, str] = None):
        """ Define an entity set

        :param name: Entity set name
        :param entity_type: EdmEntityType, or its name (resolved by EntityDataModel)
        :param index: Search index name. Default: the lowercased entity set name
        :param doc_type: Document type (the join relation name). Default: the entity type name
        :param navigation_bindings: {navigation property name: target entity set name}.
            Only needed when the target entity type is exposed by more than one entity set.
        """
        self.name = name
        self.entity_type = entity_type
        self.index = index or name.lower()
        self.doc_type = doc_type
        self.navigation_bindings = dict(navigation_bindings or {})

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self.name)


class EntityDataModel:
    """ An immutable snapshot of the Entity Data Model, and the accessor interface over it

        This is the only way the rest of the code learns about entity types: properties are looked up by name
        or by backing field, navigation properties are resolved to entity sets.

        The types and entity sets you give it are copied: the same definitions can be used to build
        more than one model, e.g. with different namespaces.
    """

    def __init__(self, namespace: str,
                 entity_types: Iterable[EdmEntityType],
                 entity_sets: Iterable[EdmEntitySet],
                 complex_types: Iterable[EdmComplexType] = ()):
        self.namespace = namespace
        entity_types = list(entity_types)
        complex_types = list(complex_types)

        # Complex types: the listed ones, and every one that a property refers to.
        # The model works with its own copies: the given objects are never modified
        complex_types += [t for t in _used_complex_types(entity_types + complex_types)
                          if t not in complex_types]
        copies = {t: t._copy_into(namespace) for t in complex_types}
        for t in copies.values():
            t._bind_properties(copies)
        self.complex_types = OrderedDict((t.name, t) for t in copies.values())

        # Entity types
        self.entity_types = OrderedDict()
        for t in entity_types:
            t = t._copy_into(namespace)
            t._bind_properties(copies)
            self.entity_types[t.name] = t

        # Entity sets: resolve their types
        self.entity_sets = OrderedDict()
        for s in entity_sets:
            type_name = s.entity_type if isinstance(s.entity_type, str) else s.entity_type.name
            if type_name not in self.entity_types:
                raise ValueError('Entity set {!r} refers to an unknown entity type {!r}'
                                 .format(s.name, type_name))
            s = copy(s)
            s.entity_type = self.entity_types[type_name]
            s.doc_type = s.doc_type or type_name
            s.navigation_bindings = dict(s.navigation_bindings)
            self.entity_sets[s.name] = s

        # Validate navigation properties
        for t in self.entity_types.values():
            for nav in t.navigation_properties.values():
                if nav.target not in self.entity_types:
                    raise ValueError('Navigation property {}.{} refers to an unknown entity type {!r}'
                                     .format(t.name, nav.name, nav.target))

    def get_entity_set(self, name: str) -> EdmEntitySet:
        """ Get an entity set by name

        :raises NotFoundError: no such entity set
        """
        try:
            return self.entity_sets[name]
        except KeyError:
            raise NotFoundError('Entity set "{}" not found'.format(name))

    def get_entity_type(self, name: str) -> EdmEntityType:
        return self.entity_types[name]

    def get_property(self, entity_type: EdmEntityType, name: str, where: str) -> EdmProperty:
        """ Get a property by its declared name

        :raises InvalidPropertyError: no such property
        """
        prop = entity_type.get_property(name)
        if prop is None:
            raise InvalidPropertyError(entity_type.name, name, where)
        return prop

    def get_navigation_property(self, entity_type: EdmEntityType, name: str, where: str) -> EdmNavigationProperty:
        """ Get a navigation property by name

        :raises InvalidNavigationError: no such navigation property
        """
        nav = entity_type.get_navigation_property(name)
        if nav is None:
            raise InvalidNavigationError(entity_type.name, name, where)
        return nav

    def get_navigation_target(self, entity_set: EdmEntitySet, navigation: EdmNavigationProperty) -> EdmEntitySet:
        """ Resolve the entity set that a navigation property leads to

            Navigation bindings are used first; otherwise, the target type must be exposed by exactly one entity set.

            :raises InvalidNavigationError: can't tell which entity set it is
        """
        # Explicit binding
        if navigation.name in entity_set.navigation_bindings:
            return self.get_entity_set(entity_set.navigation_bindings[navigation.name])

        # The only entity set of the target type
        candidates = [s for s in self.entity_sets.values()
                      if s.entity_type.name == navigation.target]
        if len(candidates) != 1:
            raise InvalidNavigationError(entity_set.entity_type.name, navigation.name, 'navigation binding')
        return candidates[0]

    def needs_keyword(self, prop: EdmProperty) -> bool:
        """ Does filtering on this property require the exact-match sub-field? """
        return prop.keyword and not prop.is_id

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self.namespace)


def _used_complex_types(types: List[_StructuredType]) -> List[EdmComplexType]:
    """ Get the complex types that properties of the given types refer to, recursively """
    found = []
    pending = list(types)
    while pending:
        for prop in pending.pop(0).properties.values():
            if prop.complex_type is not None and prop.complex_type not in found:
                found.append(prop.complex_type)
                pending.append(prop.complex_type)
    return found
