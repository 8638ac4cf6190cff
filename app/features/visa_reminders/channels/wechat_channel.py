"""
WeChat delivery through the Official Account template-message API.

Two calls per delivery: exchange app id/secret for a short-lived access
token, then send the template message with that token.
"""

from app.features.visa_reminders.domain import Channel, Profile, ReminderOccurrence, Visa
from app.infrastructure.observability.logging import get_logger

from .base import ReminderChannel

logger = get_logger(__name__)

WECHAT_TOKEN_URL = "https://api.weixin.qq.com/cgi-bin/token"
WECHAT_TEMPLATE_SEND_URL = "https://api.weixin.qq.com/cgi-bin/message/template/send"
TEMPLATE_COLOR = "#173177"


class WeChatChannel(ReminderChannel):
    name = Channel.WECHAT

    def is_configured(self) -> bool:
        return bool(self.config.WECHAT_APP_ID and self.config.WECHAT_APP_SECRET)

    async def _deliver(
        self, profile: Profile, visa: Visa, reminder: ReminderOccurrence, message: str
    ) -> bool:
        openid = profile.preferences.wechat_id
        if not openid:
            logger.warning("WeChat id missing", reminder_id=reminder.id, user_id=profile.id)
            return False

        async with self._client() as client:
            token_response = await client.get(
                WECHAT_TOKEN_URL,
                params={
                    "grant_type": "client_credential",
                    "appid": self.config.WECHAT_APP_ID,
                    "secret": self.config.WECHAT_APP_SECRET,
                },
            )
            access_token = None
            if token_response.is_success:
                access_token = token_response.json().get("access_token")
            if not access_token:
                logger.error(
                    "Failed to get WeChat access token",
                    reminder_id=reminder.id,
                    status_code=token_response.status_code,
                )
                return False

            payload = {
                "touser": openid,
                "template_id": self.config.WECHAT_TEMPLATE_ID,
                "data": {
                    "first": {"value": "签证到期提醒", "color": TEMPLATE_COLOR},
                    "keyword1": {"value": message, "color": TEMPLATE_COLOR},
                    "remark": {"value": "请及时续签以避免签证过期。", "color": TEMPLATE_COLOR},
                },
            }
            response = await client.post(
                WECHAT_TEMPLATE_SEND_URL,
                params={"access_token": access_token},
                json=payload,
            )

        if not self._log_response(response, reminder):
            return False

        # WeChat reports API errors with HTTP 200 and a nonzero errcode
        errcode = response.json().get("errcode", 0)
        if errcode:
            logger.warning(
                "WeChat rejected template message",
                reminder_id=reminder.id,
                errcode=errcode,
                errmsg=response.json().get("errmsg"),
            )
            return False
        return True
