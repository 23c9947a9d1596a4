"""Human verification oracle — Google reCAPTCHA v3.

Learn: reCAPTCHA v3 never shows a challenge. The browser gets a token,
we POST it to Google's siteverify endpoint with our secret, and Google
answers with `success` and a `score` between 0.0 (bot) and 1.0 (human).
Anything below the threshold (0.5) counts as a failure even when
`success` is true.

The oracle only ever answers True/False. Network trouble, HTTP errors
and malformed responses are all False: we fail closed.
"""

from typing import Optional

import httpx
import structlog

from gamegauge.config import settings

logger = structlog.get_logger()


class RecaptchaVerifier:
    """Checks a reCAPTCHA token against Google's siteverify API."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        verify_url: Optional[str] = None,
        threshold: Optional[float] = None,
        enabled: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.recaptcha_secret_key
        self.verify_url = verify_url or settings.recaptcha_verify_url
        self.threshold = threshold if threshold is not None else settings.recaptcha_score_threshold
        self.enabled = enabled if enabled is not None else settings.recaptcha_enabled
        self._transport = transport

    async def check(self, token: Optional[str]) -> bool:
        """True when Google vouches for the token with a high enough score."""
        if not self.enabled:
            logger.warning("recaptcha.disabled")
            return True
        if not token:
            return False

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=10.0) as client:
                r = await client.post(
                    self.verify_url,
                    data={"secret": self.secret_key, "response": token},
                )
                r.raise_for_status()
                body = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("recaptcha.unavailable", error=str(e))
            return False

        if not body.get("success"):
            logger.info("recaptcha.rejected", error_codes=body.get("error-codes"))
            return False

        score = body.get("score")
        if not isinstance(score, (int, float)) or score < self.threshold:
            logger.info("recaptcha.low_score", score=score, threshold=self.threshold)
            return False
        return True


def get_human_verifier() -> RecaptchaVerifier:
    """FastAPI dependency — overridden in tests with a fake oracle."""
    return RecaptchaVerifier()
