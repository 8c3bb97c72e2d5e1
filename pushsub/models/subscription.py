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
A subscription is a topic we asked a hub to deliver to our callback.

Subscriptions live in memory only. The Subscriptions container holds the
pending and active sets the callback endpoint consults; every change to
them goes through its lock, so concurrent callback requests see a
consistent view.
"""
from datetime import datetime
from threading import Lock

import logging
logger = logging.getLogger(__name__)

PENDING = 'pending'
ACTIVE = 'active'
DENIED = 'denied'
REMOVED = 'removed'


class Subscription(object):

    def __repr__(self):
        return "<Subscription %s (%s)>" % (self.topic, self.state)

    def __init__(self, topic, hub, mode='subscribe'):
        self.topic = topic
        self.hub = hub
        # The handshake awaiting verification: 'subscribe' or 'unsubscribe'
        self.mode = mode
        self.state = PENDING
        self.lease_seconds = None
        self.created_date = datetime.now()
        self.verified_date = None


class Subscriptions(object):
    """Pending and active subscriptions, keyed by topic URL."""

    def __init__(self):
        self._lock = Lock()
        self._pending = {}
        self._active = {}

    def __len__(self):
        with self._lock:
            return len(set(self._pending) | set(self._active))

    def mark_pending(self, topic, hub, mode='subscribe'):
        """
        Record that a handshake for `topic` is about to be sent.

        Replaces any pending entry the topic already had.
        """
        subscription = Subscription(topic, hub, mode)
        with self._lock:
            self._pending[topic] = subscription
        logger.debug('Marked %s pending %s via %s', topic, mode, hub)
        return subscription

    def discard_pending(self, topic):
        """Drops the pending entry for `topic`, if any, and returns it."""
        with self._lock:
            return self._pending.pop(topic, None)

    def consume_pending(self, topic):
        """
        Removes and returns the pending entry for `topic`.

        Returns None if the topic is not pending. Test and removal happen
        under one lock, so each pending entry is handed out at most once.
        """
        with self._lock:
            return self._pending.pop(topic, None)

    def activate(self, subscription, lease_seconds):
        subscription.state = ACTIVE
        subscription.lease_seconds = lease_seconds
        subscription.verified_date = datetime.now()
        with self._lock:
            self._active[subscription.topic] = subscription
        logger.info('Subscription to %s active for %s seconds',
                    subscription.topic, lease_seconds)

    def deny(self, subscription):
        subscription.state = DENIED
        subscription.verified_date = datetime.now()
        logger.info('Subscription to %s denied by %s',
                    subscription.topic, subscription.hub)

    def remove(self, topic):
        """Takes `topic` out of the active set and returns its record."""
        with self._lock:
            subscription = self._active.pop(topic, None)
        if subscription is not None:
            subscription.state = REMOVED
            subscription.verified_date = datetime.now()
            logger.info('Subscription to %s removed', topic)
        return subscription

    def get(self, topic):
        """The pending entry for `topic`, else its active one, else None."""
        with self._lock:
            return self._pending.get(topic) or self._active.get(topic)

    def is_pending(self, topic):
        with self._lock:
            return topic in self._pending

    def is_active(self, topic):
        with self._lock:
            return topic in self._active

    def pending_topics(self):
        with self._lock:
            return set(self._pending)

    def active_topics(self):
        with self._lock:
            return set(self._active)
