"""Tests for the Kafka, HTTP and WebSocket plugins."""

from __future__ import annotations

import asyncio

import pytest

from asyncapigen.models import MessageModel, Operation, ServerDeclaration
from asyncapigen.plugins import ChannelContext, HttpPlugin, KafkaPlugin, WebSocketPlugin


def _channel(address: str, config: dict | None = None) -> ChannelContext:
    return ChannelContext(name=address.strip("/"), address=address, operation=Operation(name="op"), config=config or {})


def test_kafka_channel_binding_uses_configured_topic() -> None:
    fragment = asyncio.run(KafkaPlugin().generate_channel_binding(_channel("/orders", {"topic": "orders"})))

    assert fragment == {"kafka": {"topic": "orders", "bindingVersion": "0.5.0"}}


def test_kafka_channel_binding_falls_back_to_address() -> None:
    fragment = asyncio.run(
        KafkaPlugin().generate_channel_binding(_channel("/user-events", {"partitions": 3, "replicas": 2}))
    )

    assert fragment == {
        "kafka": {"topic": "user-events", "partitions": 3, "replicas": 2, "bindingVersion": "0.5.0"}
    }


def test_kafka_operation_binding_defaults_and_overrides() -> None:
    plugin = KafkaPlugin()

    defaults = asyncio.run(plugin.generate_operation_binding(Operation(name="op", protocol="kafka")))
    custom = asyncio.run(
        plugin.generate_operation_binding(
            Operation(name="op", protocol="kafka", protocol_config={"groupId": "billing"})
        )
    )

    assert defaults["kafka"]["groupId"] == "asyncapigen-group"
    assert defaults["kafka"]["clientId"] == "asyncapigen"
    assert custom["kafka"]["groupId"] == "billing"


def test_kafka_message_binding_merges_user_config_but_keeps_version() -> None:
    message = MessageModel(
        name="Evt",
        bindings={"kafka": {"schemaIdLocation": "header", "bindingVersion": "0.1.0"}},
    )

    fragment = asyncio.run(KafkaPlugin().generate_message_binding(message))

    assert fragment["kafka"]["schemaIdLocation"] == "header"
    assert fragment["kafka"]["schemaIdPayloadEncoding"] == "apicurio-new"
    assert fragment["kafka"]["bindingVersion"] == "0.5.0"


def test_kafka_server_binding_defaults() -> None:
    server = ServerDeclaration(name="prod", url="broker:9092", protocol="kafka")

    fragment = asyncio.run(KafkaPlugin().generate_server_binding(server))

    assert fragment["kafka"]["schemaRegistryUrl"] == "http://localhost:8081"
    assert fragment["kafka"]["schemaRegistryVendor"] == "apicurio"


@pytest.mark.parametrize(
    "config, expected",
    [
        ({"topic": "orders", "partitions": 3}, True),
        ({"schemaIdLocation": "footer"}, False),
        ({"partitions": 0}, False),
        ({"replicas": True}, False),
        ({"groupId": 42}, False),
        ({"groupId": {"type": "string"}}, True),
        ("not-a-mapping", False),
    ],
)
def test_kafka_config_validation(config, expected: bool) -> None:
    assert asyncio.run(KafkaPlugin().validate_config(config)) is expected


def test_http_operation_binding_maps_action_to_type() -> None:
    plugin = HttpPlugin()
    send = Operation(name="create", direction="publish", protocol="http", protocol_config={"method": "put"})
    receive = Operation(name="poll", direction="subscribe", protocol="http")

    assert asyncio.run(plugin.generate_operation_binding(send)) == {
        "http": {"method": "PUT", "type": "request", "bindingVersion": "0.3.0"}
    }
    assert asyncio.run(plugin.generate_operation_binding(receive))["http"]["type"] == "response"


def test_http_operation_binding_rejects_unknown_method() -> None:
    operation = Operation(name="op", protocol="http", protocol_config={"method": "FETCH"})

    with pytest.raises(ValueError):
        asyncio.run(HttpPlugin().generate_operation_binding(operation))


def test_http_message_binding_declares_content_type_header() -> None:
    message = MessageModel(name="Evt", content_type="application/avro", bindings={"http": {"statusCode": 202}})

    fragment = asyncio.run(HttpPlugin().generate_message_binding(message))

    assert fragment["http"]["headers"]["properties"]["Content-Type"]["enum"] == ["application/avro"]
    assert fragment["http"]["statusCode"] == 202
    assert fragment["http"]["bindingVersion"] == "0.3.0"


def test_http_config_validation() -> None:
    plugin = HttpPlugin()

    assert asyncio.run(plugin.validate_config({"method": "get", "statusCode": 200})) is True
    assert asyncio.run(plugin.validate_config({"statusCode": 700})) is False
    assert asyncio.run(plugin.validate_config({"method": "BREW"})) is False


def test_websocket_operation_binding_is_empty() -> None:
    assert asyncio.run(WebSocketPlugin().generate_operation_binding(Operation(name="op"))) == {}


def test_websocket_message_and_server_bindings_use_ws_key() -> None:
    plugin = WebSocketPlugin()
    message = MessageModel(name="Evt", bindings={"ws": {"subprotocol": "graphql-ws"}})
    server = ServerDeclaration(name="live", url="wss://stream", protocol="wss")

    message_fragment = asyncio.run(plugin.generate_message_binding(message))
    server_fragment = asyncio.run(plugin.generate_server_binding(server))

    assert message_fragment == {"ws": {"method": "GET", "subprotocol": "graphql-ws", "bindingVersion": "0.1.0"}}
    assert server_fragment == {"ws": {"method": "GET", "subprotocol": "asyncapi", "bindingVersion": "0.1.0"}}


def test_websocket_config_validation() -> None:
    plugin = WebSocketPlugin()

    assert asyncio.run(plugin.validate_config({"method": "post"})) is True
    assert asyncio.run(plugin.validate_config({"method": "PUT"})) is False
    assert asyncio.run(plugin.validate_config({"subprotocol": 3})) is False
