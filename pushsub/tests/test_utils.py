from unittest import TestCase

from pyramid.request import Request
from webob.multidict import MultiDict

from ..utils import add_query_params, first_param, is_valid_url
from ..utils import normalize_iri, require_methods


class URLValidationTests(TestCase):

    def test_good_urls(self):
        self.assertTrue(is_valid_url('http://www.example.com/'))
        self.assertTrue(is_valid_url('https://example.com:8443/feed?a=b'))

    def test_bad_urls(self):
        """
        A 'good' URL will have:
            * an http or https scheme
            * a netloc
            * no fragment
            * a numeric port, if any
        """
        self.assertFalse(is_valid_url(''))
        self.assertFalse(is_valid_url(None))
        self.assertFalse(is_valid_url('http://'))
        self.assertFalse(is_valid_url('www.site.com'))
        self.assertFalse(is_valid_url('/path-only'))
        self.assertFalse(is_valid_url('ftp://example.com/'))
        self.assertFalse(is_valid_url('http://google.com/#fragment'))
        self.assertFalse(is_valid_url('http://google.com:port/'))

    def test_normalize_iri(self):
        self.assertEqual(normalize_iri(u'http://example.com/caf\xe9'),
                         'http://example.com/caf%C3%A9')
        self.assertEqual(normalize_iri('http://example.com/'),
                         'http://example.com/')


class QueryParamTests(TestCase):

    def test_add_query_params(self):
        url = add_query_params('http://example.com/cb',
                               [('hub', 'http://hub/'), ('topic', 't')])
        self.assertEqual(url,
                         'http://example.com/cb?hub=http%3A%2F%2Fhub%2F&topic=t')

    def test_add_query_params_keeps_existing(self):
        url = add_query_params('http://example.com/cb?key=1',
                               [('topic', 't')])
        self.assertEqual(url, 'http://example.com/cb?key=1&topic=t')

    def test_first_param(self):
        params = MultiDict()
        params.add('hub.mode', 'subscribe')
        params.add('hub.mode', 'unsubscribe')
        self.assertEqual(first_param(params, 'hub.mode'), 'subscribe')
        self.assertEqual(first_param(params, 'hub.topic'), None)


class RequireMethodsTests(TestCase):

    def setUp(self):
        @require_methods('GET', 'POST')
        def view(context, request):
            return 'called'
        self.view = view

    def test_allowed(self):
        request = Request.blank('/')
        self.assertEqual(self.view(None, request), 'called')
        request = Request.blank('/', POST={'a': 'b'})
        self.assertEqual(self.view(None, request), 'called')

    def test_not_allowed(self):
        request = Request.blank('/', method='DELETE')
        info = self.view(None, request)
        self.assertEqual(info.status_code, 405)
        self.assertEqual(info.headers['Allow'], 'GET, POST')

    def test_request_only(self):
        @require_methods('POST')
        def view(request):
            return 'called'
        self.assertEqual(view(Request.blank('/')).status_code, 405)
