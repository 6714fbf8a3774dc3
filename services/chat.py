"""Conversations between a buyer and a showroom."""
import logging
from datetime import datetime

from errors import Forbidden, NotFound, ValidationError, parse_id
from extensions import db
from models import Car, ChatConversation, ChatMessage, Room, User
from models.chat import MESSAGE_TYPES
from permissions import Role
from services import relay
from services.notifications import notify

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50


def preview(text):
    if len(text) > PREVIEW_LENGTH:
        return text[:PREVIEW_LENGTH] + "..."
    return text


def participants(conversation):
    """The buyer and the room's admin, whichever still exist."""
    room = conversation.room
    admin_id = room.admin_id if room else None
    return [uid for uid in (conversation.user_id, admin_id) if uid is not None]


def start_conversation(identity, car_id):
    """Get or create the caller's conversation with the showroom selling ``car_id``."""
    if not car_id:
        raise ValidationError("Car ID is required")
    car = db.session.get(Car, parse_id(car_id, "carId"))
    if car is None:
        raise NotFound("Car not found")
    if car.admin_id == identity.id:
        raise ValidationError("Cannot chat with your own car")

    room = db.session.get(Room, car.room_id)
    if room is None:
        raise NotFound("Room not found")
    if not room.is_active:
        raise ValidationError("This showroom is not active")
    if room.admin_id == identity.id:
        raise ValidationError("Cannot chat in your own showroom")

    conversation = ChatConversation.query.filter_by(user_id=identity.id, room_id=room.id).first()
    if conversation is not None:
        return conversation, False

    conversation = ChatConversation(user_id=identity.id, room_id=room.id, is_active=True)
    db.session.add(conversation)
    db.session.commit()
    logger.info("Conversation %s opened by user %s with room %s", conversation.id, identity.id, room.id)
    return conversation, True


def get_conversation_for(conversation_id, identity):
    conversation = db.session.get(ChatConversation, parse_id(conversation_id, "conversationId"))
    if conversation is None:
        raise NotFound("Conversation not found")
    if identity.role != Role.SUPERADMIN and identity.id not in participants(conversation):
        raise Forbidden("Unauthorized to access this conversation")
    return conversation


def _car_snapshot(car_id):
    if not car_id:
        raise ValidationError("Car ID is required for car details messages")
    car = db.session.get(Car, parse_id(car_id, "carId"))
    if car is None:
        raise NotFound("Car not found")
    snapshot = car.summary()
    snapshot.update({
        "price": float(car.price),
        "mileage": car.mileage,
        "image": (car.images or [None])[0],
    })
    return snapshot


def post_message(identity, conversation_id, text, message_type="text", car_id=None):
    if not conversation_id:
        raise ValidationError("Missing conversationId")
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Message is required")
    if message_type not in MESSAGE_TYPES:
        raise ValidationError(f"Invalid message type. Must be one of: {', '.join(MESSAGE_TYPES)}")

    conversation = get_conversation_for(conversation_id, identity)
    car_details = _car_snapshot(car_id) if message_type == "car_details" else None

    message = ChatMessage(
        conversation_id=conversation.id,
        sender_id=identity.id,
        message=text.strip(),
        message_type=message_type,
        car_details=car_details,
        is_read=False,
    )
    conversation.last_message_at = datetime.now()
    db.session.add(message)
    db.session.commit()

    _fan_out(conversation, message, identity)
    return message


def _fan_out(conversation, message, identity):
    sender = db.session.get(User, identity.id)
    sender_name = sender.username if sender else "Someone"

    relay.publish(
        relay.chat_channel(conversation.id),
        "new-message",
        {"conversationId": conversation.id, "message": message.to_dict()},
    )
    # Thông báo cho mọi người trong cuộc trò chuyện trừ người gửi
    for recipient_id in participants(conversation):
        if recipient_id == identity.id:
            continue
        notify(
            recipient_id,
            f"New message from {sender_name}",
            preview(message.message),
            type="chat",
            sender_id=identity.id,
            related_entity_id=conversation.id,
        )


def list_conversations(identity):
    query = ChatConversation.query
    if identity.role == Role.ADMIN:
        room_ids = [r.id for r in Room.query.filter_by(admin_id=identity.id).all()]
        query = query.filter(
            (ChatConversation.user_id == identity.id) | ChatConversation.room_id.in_(room_ids)
        )
    elif identity.role != Role.SUPERADMIN:
        query = query.filter_by(user_id=identity.id)
    return query.order_by(
        ChatConversation.last_message_at.desc(), ChatConversation.id.desc()
    ).all()


def list_messages(conversation_id, identity):
    conversation = get_conversation_for(conversation_id, identity)
    return conversation, list(conversation.messages)
