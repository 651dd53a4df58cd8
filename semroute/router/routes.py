"""
Built-in Route Definitions

Default routes used when no route definition file is configured. They
cover a typical assistant front door where each route maps to a tool or
downstream handler.

Each route is defined by a collection of utterances (example phrases)
that represent the semantic space of that category. The embedding model
recognizes similar queries even when the exact phrasing differs.

Routes:
    - chitchat: Greetings and small talk
    - weather: Forecasts and current conditions
    - billing: Invoices, payments, refunds
    - tech_support: Something is broken or not working
    - human_handoff: The user wants a person

Guidelines for utterances:
    1. Include 10-20 diverse examples per route
    2. Cover variations in phrasing and tone
    3. Keep every utterance unique across all routes (it is the store key)
"""

from semroute.router.models import Route


CHITCHAT_UTTERANCES: list[str] = [
    "hi",
    "hello there",
    "good morning",
    "how are you doing today?",
    "what's up",
    "nice to meet you",
    "how's your day going",
    "hey, how is it going",
    "thanks, have a great day",
    "tell me a joke",
    "what is your name?",
    "are you a robot?",
]


WEATHER_UTTERANCES: list[str] = [
    "what's the weather like today",
    "will it rain tomorrow?",
    "do I need an umbrella",
    "how hot is it outside",
    "weather forecast for the weekend",
    "is it going to snow tonight",
    "what is the temperature in London",
    "is it windy right now",
    "should I wear a jacket today",
    "when will the storm arrive",
]


BILLING_UTTERANCES: list[str] = [
    "I was charged twice",
    "I want a refund",
    "where can I download my invoice",
    "how do I update my credit card",
    "why is my bill so high this month",
    "cancel my subscription",
    "what payment methods do you accept",
    "my payment failed",
    "change my billing address",
    "when will I be charged next",
]


TECH_SUPPORT_UTTERANCES: list[str] = [
    "the app keeps crashing",
    "I can't log in to my account",
    "I forgot my password",
    "the page won't load",
    "I get an error when I click save",
    "my upload is stuck",
    "the website is really slow",
    "notifications stopped working",
    "how do I reset the device",
    "the sync is not working on my phone",
]


HUMAN_HANDOFF_UTTERANCES: list[str] = [
    "let me talk to a human",
    "I want to speak to an agent",
    "connect me with customer service",
    "is there a real person I can talk to",
    "get me a manager",
    "transfer me to support staff",
    "I don't want to talk to a bot",
    "can someone call me back",
]


def create_routes() -> list[Route]:
    """
    Create Route objects from the utterance definitions.

    Returns:
        list[Route]: The built-in routes, in scan order.
    """
    return [
        Route(
            name="chitchat",
            utterances=CHITCHAT_UTTERANCES,
            description="Greetings, small talk and questions about the assistant",
        ),
        Route(
            name="weather",
            utterances=WEATHER_UTTERANCES,
            description="Forecasts and current weather conditions",
        ),
        Route(
            name="billing",
            utterances=BILLING_UTTERANCES,
            description="Invoices, charges, refunds and payment methods",
        ),
        Route(
            name="tech_support",
            utterances=TECH_SUPPORT_UTTERANCES,
            description="Errors, crashes, login problems and broken features",
        ),
        Route(
            name="human_handoff",
            utterances=HUMAN_HANDOFF_UTTERANCES,
            description="Requests to be put through to a person",
        ),
    ]


def get_route_names() -> list[str]:
    """Return the names of the built-in routes, in scan order."""
    return ["chitchat", "weather", "billing", "tech_support", "human_handoff"]
