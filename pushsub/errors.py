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
Exceptions raised while discovering hubs and talking to them.
"""


class WebSubError(Exception):
    """Base class for everything this package raises."""


class DiscoveryError(WebSubError):
    """No hub could be found for a URL, or the URL could not be fetched."""

    def __init__(self, url, message):
        super(DiscoveryError, self).__init__(message)
        self.url = url


class ProtocolError(WebSubError):
    """A hub sent a malformed callback request.

    Carries the HTTP status the callback endpoint should answer with.
    """

    def __init__(self, status, message=''):
        super(ProtocolError, self).__init__(message)
        self.status = status


class HubDenial(WebSubError):
    """The hub refused a subscribe/unsubscribe handshake."""

    def __init__(self, hub, topic, status, body=''):
        super(HubDenial, self).__init__(
            'Hub %s refused request for topic %s (%s)' % (hub, topic, status)
        )
        self.hub = hub
        self.topic = topic
        self.status = status
        self.body = body


class HandshakeError(WebSubError):
    """The handshake POST could not be delivered to the hub."""

    def __init__(self, hub, topic, message):
        super(HandshakeError, self).__init__(message)
        self.hub = hub
        self.topic = topic
