"""
Recipe Advice Service

Optional free-text commentary on a recipe's cost and margin from an
external text-generation API. Its output is opaque and non-authoritative:
failures come back as an error message, never as an exception into the
costing or sales code.
"""

import logging

import requests

logger = logging.getLogger(__name__)

GENERATE_URL = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent'


class AdviceError(Exception):
    """Raised when the advice provider cannot produce a text."""
    pass


class AdviceProvider:
    """Capability interface: generate_advice(context) -> text."""

    def generate_advice(self, context):
        raise NotImplementedError


class NullAdvice(AdviceProvider):
    """Used when no provider is configured."""

    def generate_advice(self, context):
        raise AdviceError('Recipe advice is not configured')


class StaticAdvice(AdviceProvider):
    """Returns a fixed text; handy for tests and demos."""

    def __init__(self, text):
        self.text = text

    def generate_advice(self, context):
        return self.text


class GeminiAdvice(AdviceProvider):
    """Google Generative Language REST API."""

    def __init__(self, api_key, model, timeout=20, session=None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def generate_advice(self, context):
        payload = {'contents': [{'parts': [{'text': build_prompt(context)}]}]}
        try:
            response = self.session.post(
                GENERATE_URL.format(model=self.model),
                json=payload,
                headers={'x-goog-api-key': self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise AdviceError(f'Advice request failed: {e}') from e
        except ValueError as e:
            raise AdviceError('Advice response was not JSON') from e

        try:
            parts = data['candidates'][0]['content']['parts']
        except (KeyError, IndexError, TypeError) as e:
            raise AdviceError('Advice response had no text') from e
        text = ''.join(part.get('text', '') for part in parts if isinstance(part, dict)).strip()
        if not text:
            raise AdviceError('Advice response had no text')
        return text


def build_advice_context(pizza, breakdown):
    """Everything the provider gets to see about one recipe."""
    return {
        'name': pizza.name,
        'ingredients': [
            {'name': line['name'], 'amount': line['amount'], 'unit': line['unit']}
            for line in breakdown['lines']
        ],
        'material_cost': breakdown['material_cost'],
        'sale_price': breakdown['sale_price'],
        'margin_percent': breakdown['margin_percent'],
    }


def build_prompt(context):
    ingredients = ', '.join(
        f"{i['name']} ({i['amount']:g}{i['unit'] or ''})" for i in context['ingredients']
    )
    return (
        "As an expert food-cost consultant for a pizzeria, review this recipe:\n"
        f"Pizza: {context['name']}\n"
        f"Ingredients: {ingredients}\n"
        f"Material cost: {context['material_cost']:.2f}\n"
        f"Sale price (VAT included): {context['sale_price']:.2f}\n"
        f"Net margin: {context['margin_percent']:.1f}%\n\n"
        "Give three short, direct blocks of advice:\n"
        "1. PROFITABILITY: price versus cost, where margin is lost.\n"
        "2. FLAVOUR PROFILE: ingredient balance and menu potential.\n"
        "3. PORTIONING AND WASTE: how to use these ingredients with less waste.\n\n"
        f"Do not suggest new names, \"{context['name']}\" is final. Answer as a list."
    )


def request_advice(provider, context):
    """
    Ask the provider for advice.

    Returns:
        (text, None) on success, (None, error message) on failure
    """
    try:
        return provider.generate_advice(context), None
    except AdviceError as e:
        logger.warning("Recipe advice for %s failed: %s", context.get('name'), e)
        return None, str(e)


def get_provider(config):
    """Provider for the app config: Gemini when a key is set, otherwise none."""
    api_key = config.get('ADVICE_API_KEY')
    if not api_key:
        return NullAdvice()
    return GeminiAdvice(api_key, config.get('ADVICE_MODEL'), timeout=config.get('ADVICE_TIMEOUT', 20))
