from pyramid.config import Configurator

from .models import appmaker
from .views import callback, EventDispatchMiddleware


def root_factory(request):
    return request.registry.subscriber


def make_app(subscriber, callback_path='/', settings=None):
    """Returns a WSGI application serving `subscriber`'s callback endpoint.
    """
    config = Configurator(root_factory=root_factory, settings=settings)
    config.registry.subscriber = subscriber

    config.add_route('callback', callback_path)
    config.add_view(callback, route_name='callback')

    return EventDispatchMiddleware(config.make_wsgi_app())


def main(global_config, **settings):
    """ This function returns a Pyramid WSGI application.
    """
    subscriber = appmaker(settings)
    callback_path = settings.get('pushsub.callback_path', '/')
    return make_app(subscriber, callback_path, settings)
