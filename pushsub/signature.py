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
HMAC helpers for content distribution.

The secret handed to a hub is not the process secret itself but a key
derived from it for each topic, so one hub never learns the key another
hub signs with. Pushed bodies are signed by the hub with that derived key.
"""
import hashlib
import hmac

from .errors import ProtocolError

# Wire spellings accepted in X-Hub-Signature, mapped to hashlib names.
ALGORITHMS = {
    'sha1': 'sha1',
    'sha-1': 'sha1',
    'sha256': 'sha256',
    'sha-256': 'sha256',
    'sha384': 'sha384',
    'sha-384': 'sha384',
    'sha512': 'sha512',
    'sha-512': 'sha512',
}


def topic_key(secret, topic):
    """Derives the per-topic key: hex HMAC-SHA1 of the topic, keyed by
    the secret.
    """
    return hmac.new(
        secret.encode('utf-8'),
        topic.encode('utf-8'),
        hashlib.sha1
    ).hexdigest()


def normalize_algorithm(name):
    """Returns the hashlib name for a signature algorithm.

    Raises a 403 ProtocolError for anything we do not recognise.
    """
    algorithm = ALGORITHMS.get((name or '').strip().lower())
    if algorithm is None:
        raise ProtocolError(403, 'Unsupported signature algorithm: %s' % name)
    return algorithm


def parse_signature(header):
    """Splits an X-Hub-Signature value into (algorithm, hexdigest)."""
    algorithm, _, digest = (header or '').partition('=')
    algorithm = algorithm.strip()
    digest = digest.strip()
    if not algorithm or not digest:
        raise ProtocolError(403, 'Malformed X-Hub-Signature header')
    return normalize_algorithm(algorithm), digest


def sign(key, body, algorithm='sha1'):
    """Hex HMAC of a raw body with the given per-topic key."""
    return hmac.new(
        key.encode('utf-8'),
        body,
        getattr(hashlib, normalize_algorithm(algorithm))
    ).hexdigest()


def verify(key, body, header):
    """True if `header` is a valid signature of `body` under `key`.

    Malformed headers raise ProtocolError; a well-formed header that does
    not match returns False.
    """
    algorithm, digest = parse_signature(header)
    expected = sign(key, body, algorithm)
    return hmac.compare_digest(expected.lower().encode('utf-8'),
                               digest.lower().encode('utf-8'))
