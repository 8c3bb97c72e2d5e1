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
Notifications handed to the application that owns a Subscriber.

Listeners are plain callables registered per event kind and called
synchronously, in registration order, with one of the event values below.
"""
from collections import namedtuple

import logging
logger = logging.getLogger(__name__)

LISTENING = 'listening'
ERROR = 'error'
DENIED = 'denied'
SUBSCRIBE = 'subscribe'
UNSUBSCRIBE = 'unsubscribe'
FEED = 'feed'

EVENT_KINDS = (LISTENING, ERROR, DENIED, SUBSCRIBE, UNSUBSCRIBE, FEED)

Listening = namedtuple('Listening', ['callback_url'])
Error = namedtuple('Error', ['error'])
# `error` is the HubDenial when the hub refused the handshake outright,
# None when the denial arrived as a verification request.
Denied = namedtuple('Denied', ['hub', 'topic', 'error'])
Subscribed = namedtuple('Subscribed', ['hub', 'topic', 'lease_seconds'])
Unsubscribed = namedtuple('Unsubscribed', ['hub', 'topic'])
Fed = namedtuple('Fed', ['hub', 'topic', 'body', 'headers'])


class EventDispatcher(object):

    def __init__(self):
        self.listeners = dict((kind, []) for kind in EVENT_KINDS)

    def _listeners_for(self, kind):
        try:
            return self.listeners[kind]
        except KeyError:
            raise ValueError('Unknown event kind: %s' % kind)

    def add_listener(self, kind, listener):
        self._listeners_for(kind).append(listener)
        return listener

    def remove_listener(self, kind, listener):
        listeners = self._listeners_for(kind)
        if listener in listeners:
            listeners.remove(listener)

    def on(self, kind):
        """Decorator form of add_listener."""
        def decorator(listener):
            return self.add_listener(kind, listener)
        return decorator

    def emit(self, kind, event):
        """
        Deliver `event` to every listener of `kind`.

        A listener that raises does not stop delivery to the others. Its
        exception is logged and passed on as an `error` event, unless it
        came from an `error` listener, in which case it is only logged.
        """
        for listener in list(self._listeners_for(kind)):
            try:
                listener(event)
            except Exception as e:
                logger.exception('Listener %r failed on %s event',
                                 listener, kind)
                if kind != ERROR:
                    self.emit(ERROR, Error(e))
