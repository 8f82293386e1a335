from panel_relay.utils.config import get_settings
from panel_relay.workflow.relay import Relay

relay = Relay(get_settings())

def handler(event, context):
    """Serverless function handler: relays a browser request to the Gemini API."""
    return relay.handle(event).as_response()
