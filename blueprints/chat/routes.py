from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from services import chat

chat_bp = Blueprint("chat", __name__)


# Mở (hoặc lấy lại) cuộc trò chuyện với showroom của xe
@chat_bp.route("/start-conversation", methods=["POST"])
@login_required
def start_conversation():
    data = request.get_json(silent=True) or {}
    conversation, created = chat.start_conversation(current_user, data.get("carId"))
    return jsonify({"conversation": conversation.to_dict()}), 201 if created else 200


@chat_bp.route("", methods=["POST"])
@login_required
def send_message():
    data = request.get_json(silent=True) or {}
    message = chat.post_message(
        current_user,
        data.get("conversationId"),
        data.get("message"),
        message_type=data.get("message_type") or "text",
        car_id=data.get("carId"),
    )
    return jsonify({"message": "Message sent successfully", "data": message.to_dict()}), 201


# ?conversationId= trả tin nhắn, không có thì trả danh sách cuộc trò chuyện
@chat_bp.route("")
@login_required
def list_chat():
    conversation_id = request.args.get("conversationId")
    if conversation_id:
        conversation, messages = chat.list_messages(conversation_id, current_user)
        return jsonify({
            "conversation": conversation.to_dict(),
            "messages": [m.to_dict() for m in messages],
        })
    rows = chat.list_conversations(current_user)
    return jsonify({"conversations": [c.to_dict() for c in rows]})
