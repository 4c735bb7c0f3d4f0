"""API response fixtures for Mailgun client tests.

These fixtures mimic the structure of actual Mailgun API responses.
"""

BASE_URL = "https://api.mailgun.net/v3"
BASE_URL_V4 = "https://api.mailgun.net/v4"
DOMAIN = "mg.example.com"

# GET /<domain>/events item
EVENT_DELIVERED = {
    "id": "czsjqFATSlC3QtAK-C80nw",
    "timestamp": 1705312800.123,
    "event": "delivered",
    "recipient": "alice@example.org",
    "recipient-domain": "example.org",
    "message": {
        "headers": {
            "message-id": "20240115.abc@mg.example.com",
            "subject": "Your receipt",
            "from": "billing@mg.example.com",
            "to": "alice@example.org",
        },
        "size": 4211,
    },
    "delivery-status": {"code": 250, "message": "OK"},
    "tags": ["receipt"],
    "campaigns": [],
    "user-variables": {"order_id": "1001"},
    "envelope": {"sender": "bounce@mg.example.com", "transport": "smtp"},
    "flags": {"is-authenticated": True, "is-system-test": False, "is-test-mode": False},
}

EVENT_OPENED = {
    "id": "g3sY9fD1QhW5iCw0ZVvI2A",
    "timestamp": 1705316400.5,
    "event": "opened",
    "recipient": "bob@example.net",
    "recipient-domain": "example.net",
    "client-type": "mobile browser",
    "client-name": "Mobile Safari",
    "client-os": "iOS",
    "device-type": "mobile",
    "geolocation": {"country": "US", "region": "CA", "city": "San Francisco"},
    "tags": [],
}

EVENTS_PAGE = {
    "items": [EVENT_DELIVERED, EVENT_OPENED],
    "paging": {
        "next": f"{BASE_URL}/{DOMAIN}/events/W3siYSI6IGZhbHNlfQ==",
        "previous": f"{BASE_URL}/{DOMAIN}/events/W3siYSI6IHRydWV9==",
    },
}

# GET /domains item
DOMAIN_ITEM = {
    "name": DOMAIN,
    "type": "custom",
    "state": "active",
    "created_at": "Mon, 15 Jan 2024 10:00:00 GMT",
    "smtp_login": f"postmaster@{DOMAIN}",
    "smtp_password": "s3cr3t-password",
    "spam_action": "disabled",
    "require_tls": True,
    "skip_verification": False,
    "web_scheme": "https",
    "web_prefix": "email",
}

DOMAIN_DETAILS_RESPONSE = {
    "domain": DOMAIN_ITEM,
    "receiving_dns_records": [],
    "sending_dns_records": [],
}

DOMAIN_TRACKING_RESPONSE = {
    "tracking": {
        "click": {"active": True},
        "open": {"active": True},
        "unsubscribe": {"active": False},
    }
}

DOMAIN_VERIFY_RESPONSE = {
    "domain": DOMAIN_ITEM,
    "message": "Domain DNS records have been updated",
    "sending_dns_records": [{"record_type": "TXT", "valid": "valid", "value": "v=spf1 include:mailgun.org ~all"}],
}

SMTP_CREDENTIALS_PAGE = {
    "items": [
        {"login": f"postmaster@{DOMAIN}", "created_at": "Mon, 15 Jan 2024 10:00:00 GMT", "mailbox": DOMAIN},
    ],
    "total_count": 1,
}

# Suppressions
BOUNCE_ITEM = {
    "address": "gone@example.org",
    "code": "550",
    "error": "5.1.1 The email account that you tried to reach does not exist.",
    "created_at": "Tue, 16 Jan 2024 09:00:00 GMT",
}

COMPLAINT_ITEM = {"address": "angry@example.org", "created_at": "Wed, 17 Jan 2024 11:00:00 GMT"}

UNSUBSCRIBE_ITEM = {
    "address": "bye@example.org",
    "tags": ["*"],
    "created_at": "Thu, 18 Jan 2024 12:00:00 GMT",
}

# Templates (v4)
TEMPLATE_ITEM = {
    "name": "welcome",
    "description": "Welcome email",
    "createdAt": "Fri, 19 Jan 2024 08:00:00 GMT",
    "id": "46565d87-68b6-4edb-8b3c-34554af4bb77",
}

TEMPLATE_VERSION = {
    "tag": "v1",
    "engine": "handlebars",
    "createdAt": "Fri, 19 Jan 2024 08:00:00 GMT",
    "comment": "initial",
    "template": "<h1>Hello {{first_name}}</h1><p>Your code is {{ code }}. Bye {{first_name}}</p>",
    "subject": "Welcome, {{first_name}}",
    "active": True,
}

# GET /<domain>/stats/total
STATS_RESPONSE = {
    "start": "Mon, 01 Jan 2024 00:00:00 UTC",
    "end": "Fri, 05 Jan 2024 00:00:00 UTC",
    "resolution": "day",
    "stats": [
        {
            "time": "Mon, 01 Jan 2024 00:00:00 UTC",
            "accepted": {"total": 100},
            "delivered": {"total": 90},
            "failed": {"permanent": {"total": 5}, "total": 10},
            "opened": {"total": 30},
            "clicked": {"total": 9},
            "unsubscribed": {"total": 1},
            "complained": {"total": 0},
        },
        {
            "time": "Tue, 02 Jan 2024 00:00:00 UTC",
            "accepted": {"total": 100},
            "delivered": {"total": 100},
            "failed": {"total": 0},
            "opened": {"total": 40},
            "clicked": {"total": 10},
            "unsubscribed": {"total": 0},
            "complained": {"total": 0},
        },
    ],
}
