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
The subscriber: the client side of WebSub.

It asks hubs to (un)subscribe our callback to topics and decides what to
make of the verification requests and content pushes hubs send back. The
HTTP plumbing for the callback endpoint lives in pushsub.views.
"""
import requests
from requests.exceptions import RequestException

from .. import events
from ..discovery import discover
from ..errors import HandshakeError, HubDenial, ProtocolError
from ..signature import topic_key, verify
from ..utils import add_query_params, is_valid_url, normalize_iri
from .subscription import Subscriptions

import logging

logger = logging.getLogger(__name__)

HANDSHAKE_MODES = ('subscribe', 'unsubscribe')


class Subscriber(object):

    def __repr__(self):
        return "<Subscriber %s>" % self.callback_url

    def __init__(self, callback_url, secret, dispatcher=None):
        if not is_valid_url(callback_url):
            raise ValueError('Invalid callback URL: %s' % callback_url)
        if not secret:
            raise ValueError('A non-empty secret is required')

        self._callback_url = callback_url
        self._secret = secret
        self.subscriptions = Subscriptions()
        if dispatcher is None:
            dispatcher = events.EventDispatcher()
        self.events = dispatcher

    @property
    def callback_url(self):
        return self._callback_url

    @property
    def secret(self):
        return self._secret

    def topic_key(self, topic):
        """The key handed to the hub as hub.secret for `topic`."""
        return topic_key(self._secret, topic)

    def resolve(self, url, force=False):
        """
        Discover the hub for `url`.

        Returns:
            (hub, topic); the topic is `url` itself when `force` is set,
            the discovered one otherwise.
        """
        discovered = discover(url)
        topic = normalize_iri(url if force else discovered.topic)
        return discovered.hub, topic

    def subscribe(self, url, lease_seconds=None, force=False):
        """
        Ask the hub for `url` to deliver its updates to our callback.

        Returns:
            True if the hub accepted the request, False if it refused.
            Acceptance only means the hub will verify the request later,
            through the callback endpoint.
        """
        hub, topic = self.resolve(url, force)
        self.subscriptions.mark_pending(topic, hub, 'subscribe')
        return self.send_handshake('subscribe', hub, topic, lease_seconds)

    def unsubscribe(self, url, force=False):
        """
        Ask the hub for `url` to stop delivering to our callback.

        Any subscribe request still awaiting verification for the topic is
        abandoned; the topic then waits for the unsubscribe verification.
        """
        hub, topic = self.resolve(url, force)
        if self.subscriptions.discard_pending(topic) is not None:
            logger.info('Abandoned pending request for topic %s', topic)
        self.subscriptions.mark_pending(topic, hub, 'unsubscribe')
        return self.send_handshake('unsubscribe', hub, topic)

    def get_callback_url(self, hub, topic):
        """Our callback URL, tagged with the hub and topic it serves."""
        return add_query_params(self._callback_url,
                                [('hub', hub), ('topic', topic)])

    def send_handshake(self, mode, hub, topic, lease_seconds=None):
        """POSTs a subscription request to the hub.

        Returns:
            True if the hub accepted the request (202 or 204), False
            otherwise.
        """
        if mode not in HANDSHAKE_MODES:
            raise ValueError('Invalid hub.mode: %s' % mode)

        data = {
            'hub.verify': 'async',
            'hub.mode': mode,
            'hub.topic': topic,
            'hub.secret': self.topic_key(topic),
            'hub.callback': self.get_callback_url(hub, topic),
        }
        if mode == 'subscribe' and lease_seconds is not None:
            data['hub.lease_seconds'] = str(int(lease_seconds))

        headers = {'Content-Type': 'application/x-www-form-urlencoded'}

        try:
            response = requests.post(hub, data=data, headers=headers)
        except RequestException as e:
            self.subscriptions.discard_pending(topic)
            logger.warning('Could not reach hub %s to %s %s', hub, mode,
                           topic)
            raise HandshakeError(hub, topic, str(e))

        if response.status_code in (202, 204):
            logger.info('Hub %s accepted %s request for %s (%s)', hub, mode,
                        topic, response.status_code)
            return True

        self.subscriptions.discard_pending(topic)
        denial = HubDenial(hub, topic, response.status_code,
                           response.content)
        logger.warning('%s', denial)
        self.events.emit(events.DENIED, events.Denied(hub, topic, denial))
        return False

    def verify_intent(self, hub, topic, mode, challenge, lease_seconds=None):
        """
        Handle a hub's verification of intent for `topic`.

        The pending entry for the topic is consumed, so the same
        verification cannot be replayed.

        Returns:
            (event kind, event) to dispatch once the hub has its answer.

        Raises:
            ProtocolError 404 if the topic is not pending, 403 if the mode
            is unknown.
        """
        subscription = self.subscriptions.consume_pending(topic)
        if subscription is None:
            logger.info('Verification for unknown topic %s from %s',
                        topic, hub)
            raise ProtocolError(404, 'No pending subscription for %s' % topic)

        if subscription.hub != hub:
            logger.warning('Topic %s was requested from %s, verified by %s',
                           topic, subscription.hub, hub)
        if mode in HANDSHAKE_MODES and mode != subscription.mode:
            logger.warning('Topic %s awaited %s verification, got %s',
                           topic, subscription.mode, mode)

        if mode == 'denied':
            self.subscriptions.deny(subscription)
            return events.DENIED, events.Denied(hub, topic, None)

        if mode == 'subscribe':
            self.subscriptions.activate(subscription, lease_seconds)
            return (events.SUBSCRIBE,
                    events.Subscribed(hub, topic, lease_seconds))

        if mode == 'unsubscribe':
            self.subscriptions.remove(topic)
            return events.UNSUBSCRIBE, events.Unsubscribed(hub, topic)

        raise ProtocolError(403, 'Invalid parameter: hub.mode; '
                                 'Given: %s' % mode)

    def receive_content(self, hub, topic, body, signature, headers=None):
        """
        Authenticate content pushed by a hub.

        Returns:
            (event kind, event) for a correctly signed body, None when the
            signature does not match.

        Raises:
            ProtocolError for a malformed or unsupported signature.
        """
        if not verify(self.topic_key(topic), body, signature):
            logger.info('Signature mismatch for content on %s from %s',
                        topic, hub)
            return None

        if not self.subscriptions.is_active(topic):
            logger.debug('Content for inactive topic %s from %s', topic, hub)

        logger.info('Received %s bytes for %s from %s', len(body), topic, hub)
        return events.FEED, events.Fed(hub, topic, body, dict(headers or {}))
