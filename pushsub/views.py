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
The callback endpoint hubs talk to.

GET requests are verifications of intent, POST requests deliver content.
Events produced by a request are dispatched once the server has sent its
response, so listeners never hold up the answer to the hub.
"""
from pyramid.httpexceptions import exception_response
from pyramid.response import Response

from . import events
from .errors import ProtocolError
from .utils import first_param, require_methods

import logging
logger = logging.getLogger(__name__)


def text_response(status, message=''):
    return exception_response(status,
                              text=message,
                              content_type='text/plain')


# Events produced while handling a request wait here, in the WSGI environ,
# until the server has sent the response.
EVENTS_KEY = 'pushsub.events'


def dispatch_later(request, subscriber, kind, event):
    """Queue `event` until the response to `request` has been sent."""
    request.environ.setdefault(EVENTS_KEY, []).append(
        (subscriber, kind, event))


class DispatchingIterator(object):
    """Wraps a response's app_iter and dispatches the queued events when
    the server closes it, after the body has been written.
    """

    def __init__(self, app_iter, queued):
        self.app_iter = app_iter
        self.queued = queued

    def __iter__(self):
        return iter(self.app_iter)

    def close(self):
        try:
            if hasattr(self.app_iter, 'close'):
                self.app_iter.close()
        finally:
            while self.queued:
                subscriber, kind, event = self.queued.pop(0)
                subscriber.events.emit(kind, event)


class EventDispatchMiddleware(object):
    """WSGI middleware that holds back events until the response is out.

    Exposes the wrapped application's registry so callers can still reach
    the subscriber through `app.registry`.
    """

    def __init__(self, app):
        self.app = app
        self.registry = app.registry

    def __call__(self, environ, start_response):
        queued = environ.setdefault(EVENTS_KEY, [])
        app_iter = self.app(environ, start_response)
        return DispatchingIterator(app_iter, queued)


@require_methods('GET', 'POST')
def callback(context, request):
    subscriber = request.root

    try:
        if request.method == 'GET':
            return verify_intent(subscriber, request)
        return receive_content(subscriber, request)
    except ProtocolError as e:
        logger.info('Rejected %s %s: %s (%s)', request.method, request.url,
                    e, e.status)
        return text_response(e.status, str(e))
    except Exception as e:
        logger.exception('Error handling %s %s', request.method, request.url)
        dispatch_later(request, subscriber, events.ERROR, events.Error(e))
        return text_response(500, 'Internal Server Error')


def verify_intent(subscriber, request):
    hub = first_param(request.GET, 'hub')
    topic = first_param(request.GET, 'hub.topic')
    mode = first_param(request.GET, 'hub.mode')
    challenge = first_param(request.GET, 'hub.challenge')

    for name, value in (('hub', hub), ('hub.topic', topic),
                        ('hub.mode', mode), ('hub.challenge', challenge)):
        if not value:
            raise ProtocolError(400, 'Missing parameter: %s' % name)

    lease_seconds = None
    if mode == 'subscribe':
        lease = first_param(request.GET, 'hub.lease_seconds')
        if not lease:
            raise ProtocolError(400, 'Missing parameter: hub.lease_seconds')
        try:
            lease_seconds = int(lease)
        except ValueError:
            raise ProtocolError(400, 'hub.lease_seconds must be an integer')
        if lease_seconds < 0:
            raise ProtocolError(400, 'hub.lease_seconds must not be negative')

    kind, event = subscriber.verify_intent(hub, topic, mode, challenge,
                                           lease_seconds)
    dispatch_later(request, subscriber, kind, event)

    return Response(text=challenge, content_type='text/plain')


def receive_content(subscriber, request):
    hub = first_param(request.GET, 'hub')
    topic = first_param(request.GET, 'topic')

    # The signature covers the exact bytes received
    body = request.body

    if not hub or not topic:
        raise ProtocolError(400, 'Missing parameter: hub or topic')
    if not body:
        raise ProtocolError(400, 'Empty body')

    signature = request.headers.get('X-Hub-Signature')
    if not signature:
        raise ProtocolError(400, 'Missing X-Hub-Signature header')

    result = subscriber.receive_content(hub, topic, body, signature,
                                        request.headers)
    if result is None:
        # A mismatch is not reported to the hub as a failure
        return text_response(202, 'Accepted')

    kind, event = result
    dispatch_later(request, subscriber, kind, event)
    return exception_response(204)
