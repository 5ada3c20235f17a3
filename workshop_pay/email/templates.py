"""Email templates for WCLAN workshop notifications.

Templates return ``(html, plain_text)`` pairs. All interpolated values are
HTML-escaped in the HTML part.
"""

from datetime import datetime
from html import escape


WORKSHOP_LINKS_SUBJECT = "WCLAN - Your workshop links"

# ==============================================================================
# Base Template
# ==============================================================================

BASE_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title} - WCLAN</title>
</head>
<body style="margin: 0; padding: 0; background-color: #F7F7FA; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="background-color: #F7F7FA;">
    <tr>
      <td align="center" style="padding: 40px 20px;">
        <table role="presentation" width="600" cellpadding="0" cellspacing="0" style="background-color: #FFFFFF; border-radius: 12px; max-width: 600px;">
          <tr>
            <td style="padding: 28px 40px 20px; text-align: center; border-bottom: 1px solid #E5E7EB;">
              <h1 style="margin: 0; font-size: 26px; font-weight: 700; color: #3B3B98;">WCLAN</h1>
            </td>
          </tr>
          <tr>
            <td style="padding: 36px 40px;">
              {content}
            </td>
          </tr>
          <tr>
            <td style="padding: 20px 40px; background-color: #F9FAFB; border-top: 1px solid #E5E7EB; border-radius: 0 0 12px 12px;">
              <p style="margin: 0; font-size: 12px; color: #8E959E; text-align: center; line-height: 1.6;">
                &copy; {year} WCLAN. This email was sent automatically, please do not reply.
              </p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""


# ==============================================================================
# Template: Workshop Links
# ==============================================================================

WORKSHOP_LINKS_CONTENT = """
<p style="margin: 0 0 16px; font-size: 16px; color: #1A1D23; line-height: 1.6;">
  Hi {name},
</p>

<p style="margin: 0 0 16px; font-size: 16px; color: #4B5563; line-height: 1.6;">
  Thanks for joining the WCLAN workshop. Here are your join links and resources:
</p>

<ul style="margin: 0 0 24px; padding-left: 20px; font-size: 15px; color: #1A1D23; line-height: 1.8;">
{items}
</ul>

<p style="margin: 0; font-size: 14px; color: #6B7280; line-height: 1.6;">
  See you at the workshop!
</p>
"""

# (key, label, show the URL as link text)
LINK_ITEMS = (
    ("whatsapp", "WhatsApp", True),
    ("telegram", "Telegram", True),
    ("download", "Download", False),
)


def _link_item(label: str, url: str, show_url: bool) -> str:
    href = escape(url, quote=True)
    text = escape(url) if show_url else "Download bundle"
    return f'  <li>{label}: <a href="{href}" style="color: #3B3B98;">{text}</a></li>'


def render_workshop_links(name: str, links: dict[str, str]) -> tuple[str, str]:
    """Render the post-payment email listing the registrant's access links.

    Links that are absent or empty are left out.

    Args:
        name: Registrant's name
        links: Stored links keyed by kind (whatsapp, telegram, download)

    Returns:
        Tuple of (html_content, plain_text_content)
    """
    present = [
        (label, links[key], show_url)
        for key, label, show_url in LINK_ITEMS
        if links.get(key)
    ]

    items = "\n".join(_link_item(label, url, show) for label, url, show in present)
    content = WORKSHOP_LINKS_CONTENT.format(name=escape(name), items=items)
    year = datetime.now().year
    html = BASE_TEMPLATE.format(title="Your workshop links", content=content, year=year)

    text_items = "\n".join(f"- {label}: {url}" for label, url, _ in present)
    plain_text = f"""
Hi {name},

Thanks for joining the WCLAN workshop. Here are your join links and resources:

{text_items}

See you at the workshop!

---
(c) {year} WCLAN. This email was sent automatically, please do not reply.
"""
    return html, plain_text.strip()
