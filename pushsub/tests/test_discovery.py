from unittest import TestCase

from mock import patch
from requests.exceptions import ConnectionError

from ..discovery import discover, links_from_feed, links_from_header
from ..discovery import links_from_html
from ..errors import DiscoveryError

from .mocks import MockResponse, MultiResponse, atom_feed, html_page
from .mocks import rss_feed, urls


@patch('requests.get', new_callable=MultiResponse, mapping=urls)
class DiscoverTests(TestCase):

    def test_link_header(self, mock):
        hub, topic = discover('http://publisher.example.com/linked')
        self.assertEqual(hub, 'http://hub.example.com/')
        self.assertEqual(topic, 'http://publisher.example.com/topic')

    def test_link_header_wins_over_markup(self, mock):
        # The page body names http://htmlhub.example.com/ as its hub
        discovered = discover('http://publisher.example.com/linked')
        self.assertEqual(discovered.hub, 'http://hub.example.com/')

    def test_link_header_without_self(self, mock):
        discovered = discover('http://publisher.example.com/hub-only')
        self.assertEqual(discovered.hub, 'http://hub.example.com/')
        self.assertEqual(discovered.topic,
                         'http://publisher.example.com/hub-only')

    def test_html(self, mock):
        discovered = discover('http://publisher.example.com/cats')
        self.assertEqual(discovered.hub, 'http://htmlhub.example.com/')
        self.assertEqual(discovered.topic,
                         'http://publisher.example.com/cats')

    def test_atom(self, mock):
        discovered = discover('http://publisher.example.com/feed.atom')
        self.assertEqual(discovered.hub, 'http://hub.example.com/')
        self.assertEqual(discovered.topic,
                         'http://publisher.example.com/feed.atom')

    def test_rss_atom_links(self, mock):
        discovered = discover('http://publisher.example.com/feed.rss')
        self.assertEqual(discovered.hub, 'http://rsshub.example.com/')
        self.assertEqual(discovered.topic,
                         'http://publisher.example.com/feed.rss')

    def test_relative_hub(self, mock):
        discovered = discover('http://publisher.example.com/relative')
        self.assertEqual(discovered.hub, 'http://publisher.example.com/hub')
        self.assertEqual(discovered.topic,
                         'http://publisher.example.com/relative')

    def test_no_hub(self, mock):
        self.assertRaises(DiscoveryError, discover,
                          'http://publisher.example.com/nohub')

    def test_markup_ignored_for_other_content_types(self, mock):
        self.assertRaises(DiscoveryError, discover,
                          'http://publisher.example.com/plain')

    def test_not_found(self, mock):
        with self.assertRaises(DiscoveryError) as cm:
            discover('http://publisher.example.com/missing')
        self.assertEqual(cm.exception.url,
                         'http://publisher.example.com/missing')
        self.assertTrue('404' in str(cm.exception))

    def test_invalid_url(self, mock):
        self.assertRaises(DiscoveryError, discover, 'not a url')


class DiscoverFailureTests(TestCase):

    def test_connection_error(self):
        with patch('requests.get', side_effect=ConnectionError):
            self.assertRaises(DiscoveryError, discover,
                              'http://publisher.example.com/feed.atom')

    def test_server_error(self):
        with patch('requests.get', new_callable=MockResponse,
                   status_code=500):
            self.assertRaises(DiscoveryError, discover,
                              'http://publisher.example.com/feed.atom')

    def test_scenario_atom_link_header(self):
        response = MockResponse(headers={
            'Link': '<https://hub.example/>; rel="hub", '
                    '<https://feed.example/atom>; rel="self"'
        })
        with patch('requests.get', return_value=response) as get:
            discovered = discover('https://feed.example/atom')
        get.assert_called_once_with('https://feed.example/atom')
        self.assertEqual(discovered.hub, 'https://hub.example/')
        self.assertEqual(discovered.topic, 'https://feed.example/atom')


class LinkParsingTests(TestCase):

    def test_header_multiple_rels(self):
        links = links_from_header(
            '<http://hub.example.com/>; rel="hub self"'
        )
        self.assertEqual(links, {'hub': 'http://hub.example.com/',
                                 'self': 'http://hub.example.com/'})

    def test_header_first_hub_wins(self):
        links = links_from_header(
            '<http://one.example.com/>; rel="hub", '
            '<http://two.example.com/>; rel="hub"'
        )
        self.assertEqual(links['hub'], 'http://one.example.com/')

    def test_header_without_hub(self):
        links = links_from_header('<http://example.com/>; rel="next"')
        self.assertEqual(links, {})
        self.assertEqual(links_from_header(''), {})

    def test_html(self):
        links = links_from_html(html_page)
        self.assertEqual(links['hub'], 'http://htmlhub.example.com/')
        self.assertEqual(links['self'], 'http://publisher.example.com/cats')

    def test_atom(self):
        links = links_from_feed(atom_feed)
        self.assertEqual(links['hub'], 'http://hub.example.com/')
        self.assertEqual(links['self'],
                         'http://publisher.example.com/feed.atom')

    def test_rss(self):
        links = links_from_feed(rss_feed)
        self.assertEqual(links['hub'], 'http://rsshub.example.com/')

    def test_garbage_feed(self):
        self.assertEqual(links_from_feed(b'not xml at all'), {})
