"""
Copyright (c) 2013, Regents of the University of California
All rights reserved.

Redistribution and use in source and binary forms, with or without
modification, are permitted provided that the following conditions are met:

  * Redistributions of source code must retain the above copyright notice,
    this list of conditions and the following disclaimer.

  * Redistributions in binary form must reproduce the above copyright notice,
    this list of conditions and the following disclaimer in the documentation
    and/or other materials provided with the distribution.

  * Neither the name of the University of California nor the names of its
    contributors may be used to endorse or promote products derived from this
    software without specific prior written permission.

THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND
ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED
WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
"""

"""
Hub discovery.

Given a URL, find the hub that distributes it and the canonical topic URL
to subscribe to. The Link header is consulted first, then <link> elements
in an HTML page or an Atom/RSS feed.
"""
from collections import namedtuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from feedparser import parse
import requests
from requests.exceptions import HTTPError, RequestException
from requests.utils import parse_header_links

from .errors import DiscoveryError
from .utils import is_valid_url

import logging
logger = logging.getLogger(__name__)

Discovered = namedtuple('Discovered', ['hub', 'topic'])


def discover(url):
    """
    Fetch `url` and work out its hub and topic.

    Returns:
        A Discovered(hub, topic) tuple. The topic falls back to `url` when
        the document does not name itself with a rel="self" link.

    Raises:
        DiscoveryError if the URL cannot be fetched or names no hub.
    """
    if not is_valid_url(url):
        raise DiscoveryError(url, 'Invalid URL: %s' % url)

    try:
        response = requests.get(url)
    except RequestException as e:
        logger.warning('Could not connect to %s', url)
        raise DiscoveryError(url, 'Failed to discover %s: %s' % (url, e))

    try:
        response.raise_for_status()
    except HTTPError:
        raise DiscoveryError(
            url,
            'Failed to discover %s: HTTP %s' % (url, response.status_code)
        )

    headers = response.headers or {}

    found = links_from_header(headers.get('Link', ''))
    if not found.get('hub'):
        content_type = headers.get('Content-Type', '').lower()
        if 'html' in content_type:
            found = links_from_html(response.content)
        elif 'xml' in content_type:
            found = links_from_feed(response.content)

    hub = found.get('hub')
    if not hub:
        raise DiscoveryError(url, 'Failed to discover hub for %s' % url)

    discovered = Discovered(
        hub=urljoin(url, hub),
        topic=urljoin(url, found['self']) if found.get('self') else url
    )
    logger.info('Discovered hub %s for topic %s', discovered.hub,
                discovered.topic)
    return discovered


def _first_links(links):
    """Maps 'hub' and 'self' to the first href carrying that rel.

    `links` is an iterable of (rel attribute, href) pairs; rel attributes
    may hold several space separated values.
    """
    found = {}
    for rel, href in links:
        if not href:
            continue
        for value in rel.lower().split():
            if value in ('hub', 'self'):
                found.setdefault(value, href)
    return found


def links_from_header(value):
    """Hub and self links from an HTTP Link header."""
    if not value:
        return {}
    return _first_links(
        (link.get('rel', ''), link.get('url'))
        for link in parse_header_links(value)
    )


def links_from_html(content):
    """Hub and self links from <link> elements of an HTML page."""
    soup = BeautifulSoup(content, 'html.parser')
    links = []
    for element in soup.find_all('link', rel=True):
        rel = element.get('rel')
        if isinstance(rel, (list, tuple)):
            rel = ' '.join(rel)
        links.append((rel, element.get('href')))
    return _first_links(links)


def links_from_feed(content):
    """Hub and self links from an Atom feed, or the atom:link elements of
    an RSS feed.
    """
    parsed = parse(content)
    feed = parsed.get('feed', {})
    return _first_links(
        (link.get('rel', ''), link.get('href'))
        for link in feed.get('links', [])
    )
