from careerconnect.api import iso


def reply_to_dict(reply) -> dict:
    return {
        "id": reply.id,
        "content": reply.content,
        "sentBy": reply.sent_by,
        "senderContext": reply.sender_context,
        "displayName": reply.display_name,
        "emailSent": reply.email_sent,
        "isRead": reply.is_read,
        "sentAt": iso(reply.sent_at),
    }


def message_to_dict(msg, *, detail: bool = False) -> dict:
    data = {
        "id": msg.id,
        "name": msg.name,
        "email": msg.email,
        "subject": msg.subject,
        "message": msg.message,
        "category": msg.category,
        "priority": msg.priority,
        "status": msg.status,
        "isRead": msg.is_read,
        "isReplied": msg.is_replied,
        "companyId": msg.company_id,
        "companyName": msg.company_name,
        "assignedTo": msg.assigned_to_id,
        "submittedAt": iso(msg.created_at),
        "updatedAt": iso(msg.updated_at),
        "resolvedAt": iso(msg.resolved_at),
        "lastActivityAt": iso(msg.last_activity_at),
        "replies": [reply_to_dict(r) for r in msg.replies.all()],
    }
    if detail:
        data.update(
            {
                "adminNotes": msg.admin_notes,
                "userAgent": msg.user_agent,
                "ipAddress": msg.ip_address,
                "pageUrl": msg.page_url,
            }
        )
    return data
