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
Various utility functions.
"""
from functools import wraps
from urllib.parse import parse_qsl, quote, urlencode, urlparse, urlunparse

from pyramid.httpexceptions import exception_response

import logging
logger = logging.getLogger(__name__)


def require_methods(*methods):
    """Requires that a view receives one of the given HTTP methods,
       otherwise returning a 405 Method Not Allowed with an Allow header.
    """
    allowed = ', '.join(methods)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            # We could be called with (context, request) or just (request,)
            request = args[0]
            if len(args) > 1:
                request = args[1]
            if request.method not in methods:
                logger.debug('Rejected %s request to %s', request.method,
                             request.path)
                response = exception_response(405)
                response.headers.extend([('Allow', allowed)])
                return response

            return fn(*args, **kwargs)
        return wrapper
    return decorator


# taken from the pubsubhubbub source
def normalize_iri(url):
    """Converts a URL (possibly containing unicode characters) to an IRI.

    Args:
    url: String containing a URL, presumably having already been
      percent-decoded by a web framework receiving request parameters
      in a POST body or GET request's URL.

    Returns:
    A properly encoded IRI (see RFC 3987).
    """
    def chr_or_escape(unicode_char):
        if ord(unicode_char) > 0x7f:
            return quote(unicode_char.encode('utf-8'))
        else:
            return unicode_char
    return ''.join(chr_or_escape(c) for c in str(url))


# taken from the pubsubhubbub source
def is_valid_url(url):
    """Returns True if the URL is valid, False otherwise."""
    if not url:
        return False

    split = urlparse(url)
    if not split.scheme in ('http', 'https'):
        return False

    netloc, port = (split.netloc.split(':', 1) + [''])[:2]

    if not netloc:
        return False

    if port and not port.isdigit():
        return False

    if split.fragment:
        return False

    return True


def add_query_params(url, params):
    """Returns `url` with `params` (a list of pairs) appended to its
    query string. Existing parameters are kept.
    """
    pieces = urlparse(url)
    query = parse_qsl(pieces.query, keep_blank_values=True)
    query.extend(params)
    return urlunparse(pieces._replace(query=urlencode(query)))


def first_param(params, name):
    """The first value of a (possibly repeated) request parameter, or None.

    WebOb's MultiDict hands back the last value for a repeated key; hubs
    are expected to send each parameter once, so the first one wins.
    """
    values = params.getall(name)
    if not values:
        return None
    return values[0]
