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

import optparse
import textwrap
import threading
import sys

from pyramid.paster import get_app, get_appsettings, setup_logging
from waitress import create_server

from . import events
from .errors import WebSubError

import logging
logger = logging.getLogger(__name__)


def subscribe_topics(subscriber, topic_urls, lease_seconds=None):
    """
    Subscribes to each topic URL in turn. Failures are logged and do not
    stop the remaining subscriptions.

    Returns:
        A dictionary mapping each URL to True if its hub accepted the
        request, False otherwise.
    """
    results = {}
    for url in topic_urls:
        try:
            results[url] = subscriber.subscribe(url, lease_seconds)
        except WebSubError as e:
            logger.warning('Could not subscribe to %s: %s', url, e)
            results[url] = False
    return results


def log_events(subscriber):
    """Registers listeners that log every notification."""
    dispatcher = subscriber.events

    @dispatcher.on(events.SUBSCRIBE)
    def subscribed(event):
        logger.info('Subscribed to %s via %s (lease %s)', event.topic,
                    event.hub, event.lease_seconds)

    @dispatcher.on(events.UNSUBSCRIBE)
    def unsubscribed(event):
        logger.info('Unsubscribed from %s via %s', event.topic, event.hub)

    @dispatcher.on(events.DENIED)
    def denied(event):
        logger.warning('Subscription to %s denied by %s', event.topic,
                       event.hub)

    @dispatcher.on(events.FEED)
    def fed(event):
        logger.info('Update for %s: %s bytes', event.topic, len(event.body))

    @dispatcher.on(events.ERROR)
    def error(event):
        logger.error('Subscriber error: %s', event.error)


def serve_subscriber():
    description = """
    Serves the callback endpoint and subscribes to the topics listed in
    the configuration's pushsub.topics setting once it is listening.

    Arguments:
        config_uri: the pyramid configuration to use for the subscriber

    Example usage:
        bin/serve_subscriber etc/pushsub.ini#pushsub --port 6543
    """
    usage = "%prog config_uri"
    parser = optparse.OptionParser(
        usage=usage,
        description=textwrap.dedent(description),
    )
    parser.add_option('--host', dest='host', default='0.0.0.0',
                      help='Interface to listen on')
    parser.add_option('--port', dest='port', type='int', default=6543,
                      help='Port to listen on')

    options, args = parser.parse_args(sys.argv[1:])
    if not len(args) >= 1:
        print("You must provide a configuration file")
        return 2
    config_uri = args[0]

    setup_logging(config_uri)
    settings = get_appsettings(config_uri)
    app = get_app(config_uri)

    subscriber = app.registry.subscriber
    log_events(subscriber)

    topic_urls = settings.get('pushsub.topics', '').split()
    lease_seconds = settings.get('pushsub.lease_seconds') or None
    if lease_seconds is not None:
        lease_seconds = int(lease_seconds)

    server = create_server(app, host=options.host, port=options.port)
    subscriber.events.emit(events.LISTENING,
                           events.Listening(subscriber.callback_url))
    logger.info('Listening on %s:%s for %s', options.host, options.port,
                subscriber.callback_url)

    # Hubs may verify before answering the handshake, so subscribe from a
    # separate thread while the server runs.
    worker = threading.Thread(
        target=subscribe_topics,
        args=(subscriber, topic_urls, lease_seconds),
    )
    worker.daemon = True
    worker.start()

    try:
        server.run()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
    return 0
