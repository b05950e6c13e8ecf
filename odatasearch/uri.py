""" Parsed request: resource path segments, filter expressions, order-by items

odatasearch does not parse request text. Your OData parser gives you a resource path and a set of query options;
convert them into these plain objects, and give them to `ODataQuery.query()`:

    ODataQuery(schema).query(
        path=[EntitySetSegment('Authors', KeyPredicate('_id', "'1'")),
              NavigationSegment('books')],
        filter=Comparison('eq', Member('title'), Literal('Dune')),
        orderby=[OrderByItem(Member('year'), descending=True)],
        top=10,
    )

Filter expressions are a small tree of tagged nodes:

* `Member('name')`, `Member('address', 'city')`: a reference to a property (or to a complex sub-property)
* `Literal(value)`: a value. `Literal(None)` is `null`
* `Comparison(op, left, right)`: `eq`, `ne`, `gt`, `ge`, `lt`, `le`
* `Method(name, *args)`: `contains`, `startswith`, `endswith`
* `And(left, right)`, `Or(left, right)`, `Not(operand)`
"""

from typing import Tuple


class UriResourceKind:
    """ Resource path segment kinds """
    ENTITY_SET = 'entitySet'
    NAVIGATION_PROPERTY = 'navigationProperty'
    PRIMITIVE_PROPERTY = 'primitiveProperty'
    # Anything else is not supported, e.g.:
    COMPLEX_PROPERTY = 'complexProperty'
    SINGLETON = 'singleton'
    FUNCTION = 'function'
    COUNT = 'count'
    VALUE = 'value'


# region Resource path

class KeyPredicate:
    """ A key predicate: `Books('1')` has KeyPredicate('_id', "'1'") """

    __slots__ = ('name', 'text')

    def __init__(self, name: str, text: str):
        self.name = name
        self.text = text  # raw literal text, quotes included

    def __repr__(self):
        return '{}={}'.format(self.name, self.text)


class UriResource:
    """ A resource path segment """

    __slots__ = ('kind', 'name', 'key_predicates')

    def __init__(self, kind: str, name: str, *key_predicates: KeyPredicate):
        self.kind = kind
        self.name = name
        self.key_predicates = key_predicates  # type: Tuple[KeyPredicate]

    def __repr__(self):
        if self.key_predicates:
            return '{}({})'.format(self.name, ','.join(map(repr, self.key_predicates)))
        return self.name


class EntitySetSegment(UriResource):
    __slots__ = ()

    def __init__(self, name: str, *key_predicates: KeyPredicate):
        super(EntitySetSegment, self).__init__(UriResourceKind.ENTITY_SET, name, *key_predicates)


class NavigationSegment(UriResource):
    __slots__ = ()

    def __init__(self, name: str, *key_predicates: KeyPredicate):
        super(NavigationSegment, self).__init__(UriResourceKind.NAVIGATION_PROPERTY, name, *key_predicates)


class PrimitivePropertySegment(UriResource):
    __slots__ = ()

    def __init__(self, name: str):
        super(PrimitivePropertySegment, self).__init__(UriResourceKind.PRIMITIVE_PROPERTY, name)

# endregion


# region Expressions

class Expression:
    """ A node of a filter expression tree """
    __slots__ = ()


class Member(Expression):
    """ A reference to a property: Member('title'), or to a complex sub-property: Member('address', 'city') """
    __slots__ = ('path',)

    def __init__(self, *path: str):
        self.path = path

    def __repr__(self):
        return '/'.join(self.path)


class Literal(Expression):
    """ A literal value; `None` is the `null` literal """
    __slots__ = ('value',)

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return 'null' if self.value is None else repr(self.value)


class Comparison(Expression):
    """ A binary comparison: `eq`, `ne`, `gt`, `ge`, `lt`, `le` """
    __slots__ = ('op', 'left', 'right')

    def __init__(self, op: str, left: Expression, right: Expression):
        self.op = op
        self.left = left
        self.right = right

    def __repr__(self):
        return '({!r} {} {!r})'.format(self.left, self.op, self.right)


class Method(Expression):
    """ A method call: `contains`, `startswith`, `endswith` """
    __slots__ = ('name', 'args')

    def __init__(self, name: str, *args: Expression):
        self.name = name
        self.args = args

    def __repr__(self):
        return '{}({})'.format(self.name, ', '.join(map(repr, self.args)))


class And(Expression):
    __slots__ = ('left', 'right')

    def __init__(self, left: Expression, right: Expression):
        self.left = left
        self.right = right

    def __repr__(self):
        return '({!r} and {!r})'.format(self.left, self.right)


class Or(Expression):
    __slots__ = ('left', 'right')

    def __init__(self, left: Expression, right: Expression):
        self.left = left
        self.right = right

    def __repr__(self):
        return '({!r} or {!r})'.format(self.left, self.right)


class Not(Expression):
    __slots__ = ('operand',)

    def __init__(self, operand: Expression):
        self.operand = operand

    def __repr__(self):
        return 'not {!r}'.format(self.operand)

# endregion


class OrderByItem:
    """ One `$orderby` item: an expression, and a direction """

    __slots__ = ('expression', 'descending')

    def __init__(self, expression: Expression, descending: bool = False):
        self.expression = expression
        self.descending = descending

    def __repr__(self):
        return '{!r} {}'.format(self.expression, 'desc' if self.descending else 'asc')
