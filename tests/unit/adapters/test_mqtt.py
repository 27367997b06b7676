"""
MQTT 알림 발송 어댑터 단위 테스트
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from aiomqtt import MqttError

from remindthere.adapters.notify.mqtt import MqttNotificationSink
from remindthere.core.errors import DeliveryError
from remindthere.core.models import Notification


@pytest.fixture
def notification():
    return Notification(title="Reminder: Gym", body="Bring shoes", reminder_id="42")


@pytest.fixture
def sink():
    return MqttNotificationSink(broker_host="localhost", topic="home/reminders", qos=1)


def _mock_client(client):
    mock_cls = MagicMock()
    mock_cls.return_value.__aenter__ = AsyncMock(return_value=client)
    mock_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return mock_cls


def test_encode(notification):
    payload = json.loads(MqttNotificationSink.encode(notification))

    assert payload["reminderId"] == "42"
    assert payload["title"] == "Reminder: Gym"
    assert payload["body"] == "Bring shoes"
    assert isinstance(payload["sentAt"], int)


@pytest.mark.asyncio
async def test_deliver_publishes(sink, notification):
    """알림 발송 시 설정된 토픽으로 발행"""
    client = AsyncMock()
    mock_cls = _mock_client(client)

    with patch('remindthere.adapters.notify.mqtt.Client', mock_cls):
        await sink.deliver(notification)

    assert mock_cls.call_args.kwargs["hostname"] == "localhost"
    client.publish.assert_called_once()
    args, kwargs = client.publish.call_args
    assert args == ("home/reminders",)
    assert kwargs["qos"] == 1
    assert kwargs["retain"] is False
    assert json.loads(kwargs["payload"])["reminderId"] == "42"


@pytest.mark.asyncio
async def test_publish_error_becomes_delivery_error(sink, notification):
    client = AsyncMock()
    client.publish.side_effect = MqttError("connection lost")

    with patch('remindthere.adapters.notify.mqtt.Client', _mock_client(client)):
        with pytest.raises(DeliveryError):
            await sink.deliver(notification)


@pytest.mark.asyncio
async def test_connect_error_becomes_delivery_error(sink, notification):
    mock_cls = MagicMock()
    mock_cls.return_value.__aenter__ = AsyncMock(side_effect=MqttError("refused"))
    mock_cls.return_value.__aexit__ = AsyncMock(return_value=False)

    with patch('remindthere.adapters.notify.mqtt.Client', mock_cls):
        with pytest.raises(DeliveryError):
            await sink.deliver(notification)
