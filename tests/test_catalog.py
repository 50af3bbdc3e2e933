"""
Unit tests for apisnip.catalog module.
"""

import unittest

from apisnip.catalog import (
    NO_DESCRIPTION,
    Endpoint,
    Method,
    Status,
    extract_endpoints,
    extract_parameters,
    find_references,
)
from apisnip.errors import InvalidPathItemError, MissingPathsError, StructuralError


class TestFindReferences(unittest.TestCase):
    """Test cases for the $ref scan."""

    def test_nested_mappings_and_sequences(self):
        obj = {
            'a': {'$ref': '#/components/schemas/A'},
            'b': [{'items': {'$ref': '#/components/schemas/B'}}, 'plain'],
            'c': {'$ref': '#/components/schemas/A'},
        }
        self.assertEqual(
            find_references(obj),
            ['#/components/schemas/A', '#/components/schemas/B'],
        )

    def test_non_string_ref_ignored(self):
        self.assertEqual(find_references({'$ref': {'$ref': 'x.yaml'}}), ['x.yaml'])

    def test_scalars(self):
        self.assertEqual(find_references('#/components/schemas/A'), [])
        self.assertEqual(find_references(None), [])


class TestExtractParameters(unittest.TestCase):
    """Test cases for parameter name prefixing."""

    def test_location_prefixes(self):
        params = [
            {'name': 'id', 'in': 'path'},
            {'name': 'limit', 'in': 'query'},
            {'name': 'payload', 'in': 'body'},
            {'name': 'X-Trace', 'in': 'header'},
            {'name': 'nowhere'},
        ]
        self.assertEqual(
            extract_parameters(params),
            ['/id', '?limit', 'body:payload', 'X-Trace', 'nowhere'],
        )

    def test_reference_entries_skipped(self):
        params = [{'$ref': '#/components/parameters/Limit'}, {'name': 'q', 'in': 'query'}]
        self.assertEqual(extract_parameters(params), ['?q'])

    def test_not_a_list(self):
        self.assertEqual(extract_parameters(None), [])
        self.assertEqual(extract_parameters({'name': 'id'}), [])


class TestExtractEndpoints(unittest.TestCase):
    """Test cases for extract_endpoints."""

    def setUp(self):
        """Set up test fixtures."""
        self.document = {
            'openapi': '3.0.0',
            'paths': {
                '/pets/{petId}': {
                    'summary': 'A single pet',
                    'description': 'Ignored because summary came first',
                    'parameters': [{'name': 'petId', 'in': 'path'}],
                    'get': {
                        'summary': 'Info for a pet',
                        'parameters': [{'name': 'fields', 'in': 'query'}],
                        'responses': {
                            '200': {
                                'content': {
                                    'application/json': {
                                        'schema': {'$ref': '#/components/schemas/Pet'}
                                    }
                                }
                            },
                            'default': {'$ref': '#/components/responses/Error'},
                        },
                    },
                    'delete': {
                        'description': 'Remove a pet',
                        'responses': {'default': {'$ref': '#/components/responses/Error'}},
                    },
                    'x-internal': True,
                },
                '/pets': {
                    'description': 'Pets',
                    'get': {'summary': '', 'description': 'List all pets'},
                    'post': {},
                    'put': 'not a mapping',
                },
                '/health': {},
            },
        }

    def test_one_endpoint_per_path_sorted(self):
        endpoints = extract_endpoints(self.document)

        self.assertEqual(
            [e.path for e in endpoints], ['/health', '/pets', '/pets/{petId}']
        )

    def test_method_counts_and_verbs(self):
        endpoints = {e.path: e for e in extract_endpoints(self.document)}

        self.assertEqual([m.verb for m in endpoints['/pets'].methods], ['get', 'post', 'put'])
        self.assertEqual(
            [m.verb for m in endpoints['/pets/{petId}'].methods], ['get', 'delete']
        )
        self.assertEqual(endpoints['/health'].methods, [])

    def test_method_descriptions(self):
        endpoints = {e.path: e for e in extract_endpoints(self.document)}

        pets = endpoints['/pets'].methods
        self.assertEqual(pets[0].description, 'List all pets')
        self.assertEqual(pets[1].description, NO_DESCRIPTION)
        self.assertEqual(pets[2].description, NO_DESCRIPTION)

        pet = endpoints['/pets/{petId}'].methods
        self.assertEqual(pet[0].description, 'Info for a pet')
        self.assertEqual(pet[1].description, 'Remove a pet')

    def test_path_description_summary_wins(self):
        endpoints = {e.path: e for e in extract_endpoints(self.document)}

        self.assertEqual(endpoints['/pets/{petId}'].description, 'A single pet')
        self.assertEqual(endpoints['/pets'].description, 'Pets')
        self.assertEqual(endpoints['/health'].description, '')

    def test_summary_after_description_overrides(self):
        document = {'paths': {'/a': {'description': 'long', 'summary': 'short'}}}

        self.assertEqual(extract_endpoints(document)[0].description, 'short')

    def test_refs_are_names_deduplicated(self):
        endpoints = {e.path: e for e in extract_endpoints(self.document)}

        self.assertEqual(endpoints['/pets/{petId}'].refs, ['Pet', 'Error'])
        self.assertEqual(endpoints['/pets'].refs, [])

    def test_parameters(self):
        endpoints = {e.path: e for e in extract_endpoints(self.document)}

        self.assertEqual(endpoints['/pets/{petId}'].parameters, ['/petId', '?fields'])

    def test_everything_starts_unselected(self):
        for endpoint in extract_endpoints(self.document):
            self.assertIs(endpoint.status, Status.UNSELECTED)

    def test_missing_paths(self):
        with self.assertRaises(MissingPathsError):
            extract_endpoints({'openapi': '3.0.0'})

    def test_paths_not_a_mapping(self):
        with self.assertRaises(MissingPathsError):
            extract_endpoints({'paths': ['/a', '/b']})

    def test_path_item_not_a_mapping(self):
        with self.assertRaises(InvalidPathItemError):
            extract_endpoints({'paths': {'/a': ['get']}})

    def test_non_string_path_key(self):
        with self.assertRaises(InvalidPathItemError):
            extract_endpoints({'paths': {200: {}}})

    def test_non_string_method_key(self):
        with self.assertRaises(StructuralError):
            extract_endpoints({'paths': {'/a': {1: {}}}})


class TestEndpoint(unittest.TestCase):
    """Test cases for the Endpoint model."""

    def test_toggle(self):
        endpoint = Endpoint(path='/a')
        endpoint.toggle()
        self.assertTrue(endpoint.selected)
        endpoint.toggle()
        self.assertIs(endpoint.status, Status.UNSELECTED)

    def test_display_description_falls_back_to_methods(self):
        endpoint = Endpoint(
            path='/a',
            methods=[Method('get', 'Read it'), Method('put', 'Replace it')],
        )
        self.assertEqual(endpoint.display_description(), 'Read it/Replace it')

        endpoint.description = 'Thing'
        self.assertEqual(endpoint.display_description(), 'Thing')


if __name__ == '__main__':
    unittest.main()
