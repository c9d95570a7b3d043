"""
Bio Generator Module

Writes a short one-sentence description for a new profile.

Supports multiple providers:
1. Gemini (Google Generative Language REST API)
2. OpenAI (chat completions)
3. Disabled (no call, fallback bio)

Configure in settings.py:
BIO_PROVIDER = 'gemini' or 'openai' or 'disabled'
BIO_API_KEY = 'your_api_key'
BIO_MODEL = 'model name' (optional)
BIO_TIMEOUT = seconds before giving up
"""

from django.conf import settings
import requests
import openai
import logging

from .models import Person
from .service_result import ServiceResult

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK = 'A valued member of our community.'
GEMINI_URL = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent'
DEFAULT_MODELS = {
    'gemini': 'gemini-2.5-flash',
    'openai': 'gpt-4o-mini',
}


def build_prompt(first_name, last_name, category, role_or_class):
    if category == Person.STUDENT:
        description = f"a student in {role_or_class}"
    else:
        description = f"a {role_or_class}"
    return (
        f"Generate a short, positive, one-sentence professional description for "
        f"{first_name} {last_name}, who is {description}. Keep it under 20 words. "
        f"Example: 'A dedicated educator shaping future minds.' or "
        f"'An enthusiastic learner with a bright future.'"
    )


class BioGenerator:
    """Provider-switched bio generation that always yields a usable bio"""

    def __init__(self, provider=None, api_key=None, model=None, timeout=None, fallback=None):
        self.provider = provider or getattr(settings, 'BIO_PROVIDER', 'disabled')
        self.api_key = api_key if api_key is not None else getattr(settings, 'BIO_API_KEY', '')
        self.model = model or getattr(settings, 'BIO_MODEL', '') or DEFAULT_MODELS.get(self.provider, '')
        self.timeout = timeout or getattr(settings, 'BIO_TIMEOUT', 20)
        self.fallback = fallback or getattr(settings, 'BIO_FALLBACK', DEFAULT_FALLBACK)

    @property
    def enabled(self):
        return self.provider in ('gemini', 'openai') and bool(self.api_key)

    def generate(self, first_name, last_name, category, role_or_class):
        """Generate a bio; any failure or empty answer yields the fallback bio"""
        if not self.enabled:
            return ServiceResult.degraded(self.fallback, f"bio provider '{self.provider}' is not configured")

        prompt = build_prompt(first_name, last_name, category, role_or_class)

        # Route to appropriate provider
        if self.provider == 'gemini':
            result = self._generate_via_gemini(prompt)
        else:
            result = self._generate_via_openai(prompt)

        if result.found and not result.value.strip():
            return ServiceResult.degraded(self.fallback, 'empty bio returned')
        return result

    def _generate_via_gemini(self, prompt):
        """Generate via the Gemini generateContent REST endpoint"""
        try:
            response = requests.post(
                GEMINI_URL.format(model=self.model),
                headers={'x-goog-api-key': self.api_key},
                json={'contents': [{'parts': [{'text': prompt}]}]},
                timeout=self.timeout,
            )
            if response.status_code != 200:
                logger.warning(f"Gemini HTTP error: {response.status_code}")
                return ServiceResult.degraded(self.fallback, f"HTTP Error: {response.status_code}")

            data = response.json()
            parts = data['candidates'][0]['content']['parts']
            text = ''.join(part.get('text', '') for part in parts).strip()
            return ServiceResult.ok(text)

        except requests.RequestException as e:
            logger.warning(f"Gemini request error: {e}")
            return ServiceResult.degraded(self.fallback, f"Gemini request failed: {e}")
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Gemini response could not be parsed: {e}")
            return ServiceResult.degraded(self.fallback, f"Unexpected Gemini response: {e}")

    def _generate_via_openai(self, prompt):
        """Generate via OpenAI chat completions"""
        try:
            client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
            completion = client.chat.completions.create(
                model=self.model,
                messages=[{'role': 'user', 'content': prompt}],
                max_tokens=60,
            )
            text = (completion.choices[0].message.content or '').strip()
            return ServiceResult.ok(text)

        except openai.OpenAIError as e:
            logger.warning(f"OpenAI error: {e}")
            return ServiceResult.degraded(self.fallback, f"OpenAI request failed: {e}")
        except (IndexError, AttributeError) as e:
            logger.warning(f"OpenAI response could not be parsed: {e}")
            return ServiceResult.degraded(self.fallback, f"Unexpected OpenAI response: {e}")


# Convenience function
def generate_bio(first_name, last_name, category, role_or_class):
    """Quick function to generate a bio with the configured provider"""
    service = BioGenerator()
    return service.generate(first_name, last_name, category, role_or_class)
