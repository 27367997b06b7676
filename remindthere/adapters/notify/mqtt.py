"""
MQTT notification sink for RemindMeThere.

Publishes each notification as a JSON message, for home automation
setups that fan notifications out from the broker.
"""

import json
from aiomqtt import Client, MqttError
from remindthere.common.geo import now_ms
from remindthere.core.errors import DeliveryError
from remindthere.core.models import Notification
from remindthere.observability.logging_setup import get_logger

log = get_logger("remindthere.notify.mqtt")

class MqttNotificationSink:
    """MQTT JSON 발송 어댑터"""

    def __init__(self,
                 *,
                 broker_host: str,
                 broker_port: int = 1883,
                 topic: str = "remindthere/notifications",
                 username: str | None = None,
                 password: str | None = None,
                 client_id: str | None = None,
                 keepalive: int = 30,
                 qos: int = 1,
                 retain: bool = False):
        """
        초기화합니다.

        Args:
            broker_host: MQTT 브로커 호스트
            broker_port: MQTT 브로커 포트
            topic: 발송 토픽
            username: 사용자명
            password: 비밀번호
            client_id: 클라이언트 ID
            keepalive: keepalive 시간
            qos: QoS 레벨
            retain: retain 플래그
        """
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.topic = topic
        self.username = username
        self.password = password
        self.client_id = client_id
        self.keepalive = keepalive
        self.qos = qos
        self.retain = retain

    def _client(self) -> Client:
        return Client(
            hostname=self.broker_host,
            port=self.broker_port,
            username=self.username,
            password=self.password,
            identifier=self.client_id,
            keepalive=self.keepalive,
        )

    @staticmethod
    def encode(notification: Notification) -> bytes:
        payload = {
            "reminderId": notification.reminder_id,
            "title": notification.title,
            "body": notification.body,
            "sentAt": now_ms(),
        }
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")

    async def deliver(self, notification: Notification) -> None:
        # 알림은 드물게 발생하므로 발송마다 연결
        try:
            async with self._client() as client:
                await client.publish(self.topic, payload=self.encode(notification),
                                     qos=self.qos, retain=self.retain)
        except MqttError as e:
            raise DeliveryError(f"mqtt publish to {self.topic} failed: {e}") from e
        log.info(f"MQTT 알림 발송 성공 topic:{self.topic}")
