import unittest

from odatasearch.exc import SerializerError
from odatasearch.projector import ResultProjector, Property, Operation
from odatasearch.schema import PropertyKind
from odatasearch.search import SearchResult, RawHit
from odatasearch.serializer import *
from .models import schema, stores_schema
from .util import loads


Books = schema.get_entity_set('Books')
Authors = schema.get_entity_set('Authors')
Book = Books.entity_type


def collection(entity_set, *hits, total=None, count=False):
    r = SearchResult([RawHit(id, source) for id, source in hits], total)
    return ResultProjector(schema).project_collection(entity_set, r, count=count)


def entity(entity_set, id, source):
    return ResultProjector(schema).project_entity(entity_set, SearchResult([RawHit(id, source)]))


class ContextUrlTest(unittest.TestCase):
    """ Test ContextURL """

    longMessage = True
    maxDiff = None

    def test_context_url(self):
        self.assertEqual(ContextURL('Books').to_string(), '$metadata#Books')
        self.assertEqual(ContextURL('Books').to_string('http://localhost/odata/'),
                         'http://localhost/odata/$metadata#Books')

        # === Test: select
        self.assertEqual(ContextURL('Books', select=['title', 'year']).to_string(), '$metadata#Books(title,year)')
        self.assertEqual(ContextURL('Books', select=['title', 'year']).to_string('', ', '), '$metadata#Books(title, year)')

        # === Test: single entity
        self.assertEqual(ContextURL('Books', single_entity=True).to_string(), '$metadata#Books/$entity')
        self.assertEqual(ContextURL('Books', ['title'], single_entity=True).to_string(), '$metadata#Books(title)/$entity')

        # === Test: property
        self.assertEqual(ContextURL('Books', key='1', property_name='title').to_string(), "$metadata#Books('1')/title")
        self.assertEqual(ContextURL('Books', property_name='title').to_string(), '$metadata#Books/title')


class SerializerTest(unittest.TestCase):
    """ Test ODataJsonSerializer """

    longMessage = True
    maxDiff = None

    def test_entity_collection(self):
        s = ODataJsonSerializer(schema, service_root='http://localhost/odata/')
        c = collection(Books,
                       ('1', {'title': 'Dune', 'tags': ['sf'], 'available': True}),
                       ('2', {'title': 'Emma', 'year': None}))

        # === Test: minimal metadata
        result = s.entity_collection(Books, c, context_url=ContextURL('Books'))
        self.assertEqual(result.content_type, 'application/json;odata.metadata=minimal')
        self.assertEqual(loads(result), {
            '@odata.context': 'http://localhost/odata/$metadata#Books',
            'value': [
                {'_id': '1', 'title': 'Dune', 'tags': ['sf'], 'is_available': True},
                {'_id': '2', 'title': 'Emma', 'year': None},
            ],
        })

        # Properties are written in the document order
        self.assertEqual(list(loads(result)['value'][0]), ['_id', 'title', 'tags', 'is_available'])

        # === Test: select
        result = s.entity_collection(Books, c, context_url=ContextURL('Books', ['title']), select=['title'])
        self.assertEqual(loads(result), {
            '@odata.context': 'http://localhost/odata/$metadata#Books(title)',
            'value': [{'title': 'Dune'}, {'title': 'Emma'}],
        })

        # === Test: count
        result = s.entity_collection(Books, collection(Books, total=0, count=True), context_url=ContextURL('Books'))
        self.assertEqual(loads(result), {
            '@odata.context': 'http://localhost/odata/$metadata#Books',
            '@odata.count': 0,
            'value': [],
        })

        # === Test: metadata ETag
        s = ODataJsonSerializer(schema, etag='W/"1"')
        result = s.entity_collection(Books, collection(Books), context_url=ContextURL('Books'))
        self.assertEqual(loads(result), {
            '@odata.context': '$metadata#Books',
            '@odata.metadataEtag': 'W/"1"',
            'value': [],
        })

    def test_metadata_none(self):
        s = ODataJsonSerializer(schema, metadata='none', etag='W/"1"')

        result = s.entity_collection(Books, collection(Books, ('1', {'title': 'Dune'}), total=1, count=True),
                                     context_url=ContextURL('Books'))
        self.assertEqual(result.content_type, 'application/json;odata.metadata=none')
        self.assertEqual(loads(result), {
            '@odata.count': 1,
            'value': [{'_id': '1', 'title': 'Dune'}],
        })

        # No context URL needed for a primitive
        result = s.primitive(Property('title', PropertyKind.PRIMITIVE, 'Dune'), Book.get_property('title'),
                             operations=[Operation('#Library.Lend', 'Lend', "Books('1')/Library.Lend")])
        self.assertEqual(loads(result), {'value': 'Dune'})

        # === Test: invalid metadata level
        with self.assertRaises(ValueError):
            ODataJsonSerializer(schema, metadata='verbose')

    def test_metadata_full(self):
        s = ODataJsonSerializer(schema, metadata='full')
        e = entity(Books, '1', {'title': 'Dune'})
        e.operations.append(Operation('#Library.Lend', 'Lend', "Books('1')/Library.Lend"))

        # === Test: annotations, operations, navigation links
        result = s.entity(Books, e, context_url=ContextURL('Books', single_entity=True))
        self.assertEqual(result.content_type, 'application/json;odata.metadata=full')
        self.assertEqual(loads(result), {
            '@odata.context': '$metadata#Books/$entity',
            '@odata.id': "Books('1')",
            '@odata.type': '#Library.Book',
            '#Library.Lend': {'title': 'Lend', 'target': "Books('1')/Library.Lend"},
            '_id': '1',
            'title': 'Dune',
            'author@odata.navigationLink': "Books('1')/author",
            'chapters@odata.navigationLink': "Books('1')/chapters",
        })

        # === Test: expanded navigation: no link
        doc = loads(s.entity(Books, e, context_url=ContextURL('Books', single_entity=True), expand=['author']))
        self.assertNotIn('author@odata.navigationLink', doc)
        self.assertIn('chapters@odata.navigationLink', doc)

        # === Test: minimal metadata: none of that
        doc = loads(ODataJsonSerializer(schema).entity(Books, e, context_url=ContextURL('Books', single_entity=True)))
        self.assertEqual(doc, {'@odata.context': '$metadata#Books/$entity', '_id': '1', 'title': 'Dune'})

    def test_primitive(self):
        s = ODataJsonSerializer(schema)
        url = ContextURL('Books', key='1', property_name='title')

        # === Test: value
        result = s.primitive(Property('title', PropertyKind.PRIMITIVE, 'Dune'), Book.get_property('title'), url)
        self.assertEqual(loads(result), {'@odata.context': "$metadata#Books('1')/title", 'value': 'Dune'})

        # === Test: null
        result = s.primitive(Property('title', PropertyKind.PRIMITIVE, None), Book.get_property('title'), url)
        self.assertEqual(loads(result), {'@odata.context': "$metadata#Books('1')/title", '@odata.null': True})

        # === Test: undeclared
        result = s.primitive(Property('rating', PropertyKind.PRIMITIVE, 4.5), None, url)
        self.assertEqual(loads(result)['value'], 4.5)

        # === Test: no context URL
        with self.assertRaises(SerializerError) as e:
            s.primitive(Property('title', PropertyKind.PRIMITIVE, 'Dune'), Book.get_property('title'))
        self.assertEqual(e.exception.message_key, SerializerError.NO_CONTEXT_URL)

        # === Test: operations are only written with full metadata
        lend = [Operation('#Library.Lend', 'Lend', "Books('1')/Library.Lend")]
        doc = loads(s.primitive(Property('title', PropertyKind.PRIMITIVE, 'Dune'), None, url, lend))
        self.assertNotIn('#Library.Lend', doc)
        doc = loads(ODataJsonSerializer(schema, metadata='full').primitive(
            Property('title', PropertyKind.PRIMITIVE, 'Dune'), None, url, lend))
        self.assertIn('#Library.Lend', doc)

    def test_dynamic_properties(self):
        s = ODataJsonSerializer(schema)

        # === Test: undeclared fields of every shape
        e = entity(Books, '1', {
            'rating': 4.5,
            'flags': [1, 'a', None],
            'meta': {'source': 'import', 'origin': {'country': 'FR'}},
            'notes': [{'by': 'admin', 'tags': ['x']}],
        })
        doc = loads(s.entity(Books, e, context_url=ContextURL('Books', single_entity=True)))
        self.assertEqual(doc, {
            '@odata.context': '$metadata#Books/$entity',
            '_id': '1',
            'rating': 4.5,
            'flags': [1, 'a', None],
            'meta': {'source': 'import', 'origin': {'country': 'FR'}},
            'notes': [{'by': 'admin', 'tags': ['x']}],
        })

        # === Test: complex values of declared properties
        e = entity(Authors, '1', {'address': {'city': 'Paris', 'zip': '75001', 'geo': [1.5, 2.5]}})
        doc = loads(s.entity(Authors, e, context_url=ContextURL('Authors', single_entity=True)))
        self.assertEqual(doc['address'], {'city': 'Paris', 'zip_code': '75001', 'geo': [1.5, 2.5]})

        e = entity(Books, '1', {'reviews': [{'stars': 5, 'text': 'Good'}]})
        doc = loads(s.entity(Books, e, context_url=ContextURL('Books', single_entity=True)))
        self.assertEqual(doc['reviews'], [{'stars': 5, 'text': 'Good'}])

        # === Test: infer_edm_property()
        self.assertEqual(infer_edm_property(Property('x', PropertyKind.PRIMITIVE, True)).type_name, 'Edm.Boolean')
        self.assertEqual(infer_edm_property(Property('x', PropertyKind.PRIMITIVE, 1)).type_name, 'Edm.Int64')
        self.assertEqual(infer_edm_property(Property('x', PropertyKind.PRIMITIVE, 'a')).type_name, 'Edm.String')
        self.assertEqual(infer_edm_property(Property('x', PropertyKind.COLLECTION_PRIMITIVE, [1, 2])).type_name, 'Edm.Int64')
        self.assertEqual(infer_edm_property(Property('x', PropertyKind.COLLECTION_PRIMITIVE, [1, 'a'])).type_name, EDM_UNTYPED)
        self.assertEqual(infer_edm_property(Property('x', PropertyKind.COMPLEX, None)).kind, PropertyKind.COMPLEX)

    def test_nested_values(self):
        s = ODataJsonSerializer(stores_schema)
        Stores = stores_schema.get_entity_set('Stores')
        url = ContextURL('Stores', single_entity=True)

        def write(source):
            e = ResultProjector(stores_schema).project_entity(Stores, SearchResult([RawHit('1', source)]))
            return loads(s.entity(Stores, e, context_url=url))

        # === Test: a complex type nested in a complex type
        doc = write({'location': {'city': 'Oslo', 'geo': {'lat': 59.9, 'lon': 10.7}}})
        self.assertEqual(doc['location'], {'city': 'Oslo', 'geo': {'lat': 59.9, 'lon': 10.7}})

        # === Test: a collection in a complex type
        doc = write({'location': {'lines': ['a', 'b']}})
        self.assertEqual(doc['location'], {'lines': ['a', 'b']})

        # === Test: an object in a declared primitive sub-property
        doc = write({'location': {'note': {'text': 'closed'}}})
        self.assertEqual(doc['location'], {'note': {'text': 'closed'}})

        # Primitive sub-properties are still checked
        with self.assertRaises(SerializerError) as e:
            write({'location': {'city': 42}})
        self.assertEqual(e.exception.message_key, SerializerError.WRONG_PROPERTY_VALUE)

    def test_null_elements(self):
        s = ODataJsonSerializer(schema)

        # === Test: null elements of a complex collection
        e = entity(Books, '1', {'reviews': [None, {'stars': 5}]})
        doc = loads(s.entity(Books, e, context_url=ContextURL('Books', single_entity=True)))
        self.assertEqual(doc['reviews'], [None, {'stars': 5}])

        # === Test: in a collection response
        c = collection(Books, ('1', {'reviews': [{'stars': 1}, None]}))
        doc = loads(s.entity_collection(Books, c, context_url=ContextURL('Books')))
        self.assertEqual(doc['value'], [{'_id': '1', 'reviews': [{'stars': 1}, None]}])

    def test_errors(self):
        s = ODataJsonSerializer(schema)
        url = ContextURL('Books', single_entity=True)

        def write(*properties):
            e = entity(Books, '1', {})
            e.properties.extend(properties)
            return s.entity(Books, e, context_url=url)

        def assert_error(message_key, *properties):
            with self.assertRaises(SerializerError) as e:
                write(*properties)
            self.assertEqual(e.exception.message_key, message_key)

        # === Test: kind mismatch
        assert_error(SerializerError.INCONSISTENT_PROPERTY_TYPE, Property('tags', PropertyKind.PRIMITIVE, 'sf'))
        assert_error(SerializerError.INCONSISTENT_PROPERTY_TYPE, Property('title', PropertyKind.COLLECTION_PRIMITIVE, ['a']))
        assert_error(SerializerError.INCONSISTENT_PROPERTY_TYPE, Property('isbn', PropertyKind.PRIMITIVE, {'a': 1}))
        assert_error(SerializerError.INCONSISTENT_PROPERTY_TYPE, Property('reviews', PropertyKind.COLLECTION_COMPLEX, [1]))

        # === Test: wrong values
        assert_error(SerializerError.WRONG_PROPERTY_VALUE, Property('title', PropertyKind.PRIMITIVE, 42))
        assert_error(SerializerError.WRONG_PROPERTY_VALUE, Property('year', PropertyKind.PRIMITIVE, '1965'))
        assert_error(SerializerError.WRONG_PROPERTY_VALUE, Property('year', PropertyKind.PRIMITIVE, True))
        assert_error(SerializerError.WRONG_PROPERTY_VALUE, Property('tags', PropertyKind.COLLECTION_PRIMITIVE, ['a', 1]))

        # Not nullable
        assert_error(SerializerError.WRONG_PROPERTY_VALUE, Property('_id', PropertyKind.PRIMITIVE, None))

        # === Test: fine
        write(Property('year', PropertyKind.PRIMITIVE, 1965), Property('is_available', PropertyKind.PRIMITIVE, None))
