from careerconnect.api import iso


def notification_to_dict(n) -> dict:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "relatedMessage": n.related_message_id,
        "relatedData": n.related_data or {},
        "isConversational": n.is_conversational,
        "isRead": n.is_read,
        "readAt": iso(n.read_at),
        "actionUrl": n.action_url,
        "createdAt": iso(n.created_at),
        "expiresAt": iso(n.expires_at),
    }
