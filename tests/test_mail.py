"""Mail bodies built by the mail sender."""

import asyncio

from ticketing.controller import mail_sender


class TestTicketMail:

    def test_names_and_titles_are_escaped_in_html(self, outbox):
        asyncio.run(mail_sender.send_ticket_email(
            "fan@example.com", "<script>alert(1)</script>", "TIX-123456-ABCDEF",
            ["Rock & Roll", "<b>Night</b>"], 100, None,
        ))

        html = outbox[0]["html"]
        assert "<script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "Rock &amp; Roll, &lt;b&gt;Night&lt;/b&gt;" in html
        # The plain-text part is left as written
        assert "<script>alert(1)</script>" in outbox[0]["text"]
