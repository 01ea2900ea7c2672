class SocketIOBroadcaster:
    """Outbound side of the game session, backed by Flask-SocketIO.

    ``broadcast`` reaches every connection on the namespace, ``send``
    reaches one connection (its Socket.IO sid).
    """

    def __init__(self, socketio, namespace='/'):
        self.socketio = socketio
        self.namespace = namespace

    def broadcast(self, event, payload=None):
        # Use socketio.emit since this may be called from a background task
        self.socketio.emit(event, *_args(payload), namespace=self.namespace)

    def send(self, sid, event, payload=None):
        self.socketio.emit(event, *_args(payload), to=sid, namespace=self.namespace)


def _args(payload):
    return () if payload is None else (payload,)
