import unittest

from odatasearch import dsl
from odatasearch.exc import InvalidPropertyError, InvalidNavigationError, NotFoundError
from odatasearch.schema import *

from . import models
from .models import schema


class SchemaTest(unittest.TestCase):
    """ Test the Entity Data Model """

    longMessage = True
    maxDiff = None

    def test_entity_types(self):
        Book = schema.get_entity_type('Book')

        # === Test: namespace
        self.assertEqual(Book.full_name, 'Library.Book')
        self.assertEqual(schema.complex_types['Review'].full_name, 'Library.Review')

        # === Test: the identifier property is added
        self.assertEqual(list(Book.properties)[0], '_id')
        self.assertTrue(Book.key_property.is_id)
        self.assertFalse(Book.key_property.nullable)
        self.assertEqual(Book.key_property.type_name, 'Edm.String')

        # === Test: properties by name, by field
        self.assertIs(Book.get_property('is_available'), Book.find_property_by_field('available'))
        self.assertIsNone(Book.get_property('available'))
        self.assertIsNone(Book.find_property_by_field('is_available'))
        self.assertEqual(Book.get_invalid_names(['title', 'year', 'nope']), {'nope'})

        # === Test: kinds
        self.assertEqual(Book.get_property('title').kind, PropertyKind.PRIMITIVE)
        self.assertEqual(Book.get_property('tags').kind, PropertyKind.COLLECTION_PRIMITIVE)
        self.assertEqual(Book.get_property('reviews').kind, PropertyKind.COLLECTION_COMPLEX)
        self.assertEqual(schema.get_entity_type('Author').get_property('address').kind, PropertyKind.COMPLEX)

        # === Test: complex type name is qualified
        self.assertEqual(Book.get_property('reviews').type_name, 'Library.Review')

    def test_entity_sets(self):
        # === Test: defaults
        books = schema.get_entity_set('Books')
        self.assertEqual(books.index, 'library')
        self.assertEqual(books.doc_type, 'Book')
        self.assertIs(books.entity_type, schema.get_entity_type('Book'))

        # Default index: the lowercased name
        self.assertEqual(EdmEntitySet('Books', 'Book').index, 'books')

        # === Test: unknown entity set
        with self.assertRaises(NotFoundError) as e:
            schema.get_entity_set('Nope')
        self.assertEqual(e.exception.status_code, 404)

        # === Test: unknown entity type
        with self.assertRaises(ValueError):
            EntityDataModel('Library', [], [EdmEntitySet('Books', 'Book')])

        # === Test: unknown navigation target
        with self.assertRaises(ValueError):
            EntityDataModel('Library', [
                EdmEntityType('A', navigation_properties=[EdmNavigationProperty('b', 'B')])
            ], [])

    def test_shared_definitions(self):
        """ Two models built from the same definitions don't affect each other """
        books = EdmEntitySet('Books', 'Book')

        def build(namespace):
            return EntityDataModel(namespace,
                entity_types=[models.Author, models.Book, models.Chapter],
                entity_sets=[EdmEntitySet('Authors', 'Author'), books, EdmEntitySet('Chapters', 'Chapter')])

        library, archive = build('Library'), build('Archive')

        # === Test: each model has its own namespace
        self.assertEqual(library.get_entity_type('Book').full_name, 'Library.Book')
        self.assertEqual(archive.get_entity_type('Book').full_name, 'Archive.Book')
        self.assertEqual(library.get_entity_type('Book').get_property('reviews').type_name, 'Library.Review')
        self.assertEqual(archive.get_entity_type('Book').get_property('reviews').type_name, 'Archive.Review')
        self.assertEqual(archive.get_entity_type('Author').get_property('address').type_name, 'Archive.Address')

        # Complex types are collected from properties
        self.assertEqual(list(archive.complex_types), ['Address', 'Review'])

        # === Test: the definitions are left as they were
        self.assertIsNone(models.Book.namespace)
        self.assertIsNone(models.Review.namespace)
        self.assertEqual(models.Book.get_property('reviews').type_name, 'Review')
        self.assertEqual(books.entity_type, 'Book')
        self.assertIsNone(books.doc_type)

        # Entity sets are copies, bound to the model's own types
        self.assertIsNot(library.get_entity_set('Books'), books)
        self.assertIs(library.get_entity_set('Books').entity_type, library.get_entity_type('Book'))
        self.assertIs(archive.get_entity_set('Books').entity_type, archive.get_entity_type('Book'))

        # === Test: a namespace declared on the type wins
        Misc = EdmEntityType('Misc', namespace='Other')
        s = EntityDataModel('Library', [Misc], [EdmEntitySet('Misc', Misc)])
        self.assertEqual(s.get_entity_type('Misc').full_name, 'Other.Misc')
        self.assertIs(s.get_entity_set('Misc').entity_type, s.get_entity_type('Misc'))

    def test_lookups(self):
        Book = schema.get_entity_type('Book')

        # === Test: get_property()
        self.assertEqual(schema.get_property(Book, 'title', 'select').field, 'title')
        with self.assertRaises(InvalidPropertyError) as e:
            schema.get_property(Book, 'nope', 'select')
        self.assertEqual(e.exception.status_code, 400)
        self.assertIn('select', str(e.exception))

        # === Test: get_navigation_property()
        self.assertEqual(schema.get_navigation_property(Book, 'author', 'path').target, 'Author')
        with self.assertRaises(InvalidNavigationError):
            schema.get_navigation_property(Book, 'title', 'path')

        # === Test: get_navigation_target()
        books = schema.get_entity_set('Books')
        self.assertIs(schema.get_navigation_target(books, Book.get_navigation_property('author')),
                      schema.get_entity_set('Authors'))

        # Two entity sets of the same type: a binding is required
        s = EntityDataModel('Library',
            entity_types=[models.Author, models.Book, models.Chapter],
            complex_types=[models.Address, models.Review],
            entity_sets=[
                EdmEntitySet('Authors', 'Author'),
                EdmEntitySet('Books', 'Book', navigation_bindings={'chapters': 'Chapters'}),
                EdmEntitySet('Novels', 'Book'),
                EdmEntitySet('Chapters', 'Chapter', navigation_bindings={'book': 'Books'}),
                EdmEntitySet('Drafts', 'Chapter'),
            ])
        chapters_nav = Book.get_navigation_property('chapters')
        self.assertIs(s.get_navigation_target(s.get_entity_set('Books'), chapters_nav),
                      s.get_entity_set('Chapters'))
        self.assertIs(s.get_navigation_target(s.get_entity_set('Chapters'),
                                              models.Chapter.get_navigation_property('book')),
                      s.get_entity_set('Books'))
        with self.assertRaises(InvalidNavigationError):
            s.get_navigation_target(s.get_entity_set('Novels'), chapters_nav)
        with self.assertRaises(InvalidNavigationError):
            s.get_navigation_target(s.get_entity_set('Authors'), models.Author.get_navigation_property('books'))

    def test_needs_keyword(self):
        Book = schema.get_entity_type('Book')
        self.assertTrue(schema.needs_keyword(Book.get_property('title')))
        self.assertFalse(schema.needs_keyword(Book.get_property('isbn')))
        self.assertFalse(schema.needs_keyword(Book.key_property))


class ComposedQueryTest(unittest.TestCase):
    """ Test query DSL helpers """

    longMessage = True
    maxDiff = None

    def test_builders(self):
        self.assertEqual(dsl.ids([1, '2']), {'ids': {'values': ['1', '2']}})
        self.assertEqual(dsl.range_('year', 'gte', 2000), {'range': {'year': {'gte': 2000}}})
        self.assertEqual(dsl.escape_wildcard('a*b?c'), 'a\\*b\\?c')

        # === Test: anded_together()
        self.assertEqual(dsl.anded_together([]), dsl.match_all())
        self.assertEqual(dsl.anded_together([None, dsl.term('a', 1)]), dsl.term('a', 1))
        self.assertEqual(dsl.anded_together([dsl.term('a', 1), dsl.term('b', 2)]),
                         {'bool': {'filter': [{'term': {'a': 1}}, {'term': {'b': 2}}]}})

    def test_composed_query(self):
        # === Test: empty
        q = dsl.ComposedQuery()
        q.add_ids_query('Book', [])
        self.assertEqual(q.compile(), {'match_all': {}})

        # === Test: ids
        q = dsl.ComposedQuery()
        q.add_ids_query('Book', ['1'])
        self.assertEqual(q.compile(), {'ids': {'values': ['1']}})

        # === Test: parent join
        q = dsl.ComposedQuery()
        q.add_parent_query('Author', ['1']).add_ids_query('Book', [])
        self.assertEqual(q.compile(), {'has_parent': {'parent_type': 'Author', 'query': {'ids': {'values': ['1']}}}})

        # === Test: child join, with ids on both sides
        q = dsl.ComposedQuery()
        q.add_child_query('Book', ['1']).add_ids_query('Author', ['2'])
        self.assertEqual(q.compile(), {'bool': {'filter': [
            {'has_child': {'type': 'Book', 'query': {'ids': {'values': ['1']}}}},
            {'ids': {'values': ['2']}},
        ]}})
        self.assertEqual(q.steps, [('child', 'Book', ('1',)), ('ids', 'Author', ('2',))])

        # === Test: freeze
        q.freeze('library', 'Author')
        self.assertTrue(q.frozen)
        self.assertEqual((q.index, q.doc_type), ('library', 'Author'))
        with self.assertRaises(AssertionError):
            q.add_ids_query('Author', [])
