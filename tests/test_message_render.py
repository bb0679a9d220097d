"""Tests for chat_render.tui.message_render: usernames, replies, history, preview."""

from datetime import timezone

from rich.style import Style

from chat_render.core.cursor import CURSOR_SENTINEL
from chat_render.core.messages import (
    MessageType,
    ParentLoaded,
    ParentNotLoaded,
    client_message,
)
from chat_render.tui.assembler import RenderedLines, StyledRun, row_width, text_lines
from chat_render.tui.message_render import (
    NO_PREVIEW,
    REPLY_MARKER,
    RULE_CHAR,
    labelled_rule,
    preview_window,
    render_chat_message,
    render_last_messages,
    render_message,
    render_preview,
)
from tests.harness import make_history, make_message, make_reply, plain

UTC = timezone.utc


# ─── Test 1: Username framing ────────────────────────────────────────────────


class TestUsernamePrefix:
    def test_normal_post(self, theme):
        out = render_message(make_message("hi there"), True, set(), 40, theme)
        assert plain(out) == ["alice: hi there"]
        assert out.rows[0][0].style == theme.username_style("alice")

    def test_emote(self, theme):
        msg = make_message("waves", msg_type=MessageType.EMOTE)
        assert plain(render_message(msg, True, set(), 40, theme)) == ["*alice waves"]

    def test_join_omits_username(self, theme):
        msg = make_message("alice joined", msg_type=MessageType.JOIN)
        assert plain(render_message(msg, True, set(), 40, theme)) == ["alice joined"]

    def test_body_wraps_under_prefix(self, theme):
        out = render_message(make_message("aaa bbb ccc"), True, set(), 14, theme)
        assert plain(out) == ["alice: aaa bbb", "       ccc"]

    def test_no_user_no_prefix(self, theme):
        msg = client_message("server says hi", MessageType.INFORMATIVE)
        assert plain(render_message(msg, True, set(), 40, theme)) == ["server says hi"]


# ─── Test 2: Reply chains ────────────────────────────────────────────────────


class TestReplies:
    def test_parent_truncated_to_one_line(self, theme):
        reply = make_reply("child text", "word " * 15)
        out = render_message(reply, True, set(), 40, theme)
        assert out.height == 2
        header = plain(out)[0]
        assert header.startswith(REPLY_MARKER + "alice: word")
        assert header.endswith("...")
        assert row_width(out.rows[0]) <= 40
        assert plain(out)[1] == "bob: child text"

    def test_parent_is_styled_as_reply(self, theme):
        reply = make_reply("ok", "short")
        out = render_message(reply, True, set(), 40, theme)
        assert plain(out)[0] == REPLY_MARKER + "alice: short"
        parent_runs = out.rows[0][1:]
        assert all(run.style == Style.parse(theme.reply_parent_style) for run in parent_runs)

    def test_expansion_disabled(self, theme):
        reply = make_reply("ok", "short")
        assert plain(render_message(reply, False, set(), 40, theme)) == ["bob: ok"]

    def test_parent_not_loaded(self, theme):
        msg = make_message("ok", in_reply_to=ParentNotLoaded("p1"))
        assert plain(render_message(msg, True, set(), 40, theme)) == ["alice: ok"]

    def test_depth_is_one(self, theme):
        middle = make_reply("middle", "grandparent")
        child = make_message("child", user_name="carol", in_reply_to=ParentLoaded("m", middle))
        out = plain(render_message(child, True, set(), 60, theme))
        assert out == [REPLY_MARKER + "bob: middle", "carol: child"]


# ─── Test 3: Channel rendering ───────────────────────────────────────────────


class TestChatMessage:
    def test_time_prefix(self, theme):
        out = render_chat_message(make_message("Hello world"), set(), 40, "%H:%M", UTC, theme)
        assert plain(out) == ["[12:00] alice: Hello world"]

    def test_custom_time_format(self, theme):
        out = render_chat_message(make_message("x"), set(), 40, "%H:%M:%S", UTC, theme)
        assert plain(out)[0].startswith("[12:00:00] ")

    def test_attachments_listed_under_body(self, theme):
        msg = make_message("pic", attachments=("f.png",))
        out = plain(render_chat_message(msg, set(), 40, "%H:%M", UTC, theme))
        assert out == ["[12:00] alice: pic", "          [attached: `f.png`]"]

    def test_error_style(self, theme):
        msg = client_message("boom", MessageType.ERROR)
        out = render_chat_message(msg, set(), 40, "%H:%M", UTC, theme)
        body_run = out.rows[0][-1]
        assert body_run.text == "boom"
        assert body_run.style.bold

    def test_join_is_dimmed(self, theme):
        msg = make_message("bob joined", msg_type=MessageType.JOIN)
        out = render_chat_message(msg, set(), 40, "%H:%M", UTC, theme)
        assert out.rows[0][-1].style.dim

    def test_date_transition_is_a_rule(self, theme):
        msg = client_message("2024-03-02", MessageType.DATE_TRANSITION)
        out = render_chat_message(msg, set(), 20, "%H:%M", UTC, theme)
        assert plain(out) == [RULE_CHAR * 5 + "2024-03-02" + RULE_CHAR * 5]

    def test_new_messages_rule(self, theme):
        msg = client_message("New Messages", MessageType.NEW_MESSAGES_TRANSITION)
        out = render_chat_message(msg, set(), 20, "%H:%M", UTC, theme)
        assert plain(out) == [RULE_CHAR * 4 + "New Messages" + RULE_CHAR * 4]


class TestLabelledRule:
    def test_label_wider_than_rule(self):
        out = labelled_rule(text_lines("abcdef"), 4, Style())
        assert plain(out) == ["abcdef"]

    def test_empty_label(self):
        assert plain(labelled_rule(RenderedLines(), 3, Style())) == [RULE_CHAR * 3]


class TestLastMessages:
    def test_keeps_tail(self, theme):
        out = render_last_messages(make_history(5), set(), 40, 3, "%H:%M", UTC, theme)
        assert plain(out) == [
            "[14:00] alice: Message 2",
            "[15:00] alice: Message 3",
            "[16:00] alice: Message 4",
        ]

    def test_skips_deleted(self, theme):
        msgs = make_history(2) + [make_message("gone", deleted=True)]
        out = render_last_messages(msgs, set(), 40, 10, "%H:%M", UTC, theme)
        assert [line.split(": ", 1)[1] for line in plain(out)] == ["Message 0", "Message 1"]

    def test_partial_message_at_top(self, theme):
        msgs = [make_message("aaa bbb ccc"), make_message("tail")]
        out = render_last_messages(msgs, set(), 22, 2, "%H:%M", UTC, theme)
        assert plain(out) == ["               ccc", "[12:00] alice: tail"]


# ─── Test 4: Live preview ────────────────────────────────────────────────────


class TestPreview:
    def test_cursor_row_follows_editor_row(self, theme):
        out = render_preview(["hello", "world"], 1, "alice", set(), 40, theme=theme)
        assert plain(out) == ["alice: hello", "       world"]
        assert out.cursor_row == 1

    def test_empty_editor_has_no_preview(self, theme):
        out = render_preview([], 0, "alice", set(), 40, theme=theme)
        assert plain(out) == [NO_PREVIEW]
        assert out.cursor_row is None

    def test_slash_command_has_no_preview(self, theme):
        out = render_preview(["/join #x"], 0, "alice", set(), 40, theme=theme)
        assert plain(out) == [NO_PREVIEW]

    def test_me_previews_as_emote(self, theme):
        out = render_preview(["/me waves"], 0, "alice", set(), 40, theme=theme)
        assert plain(out) == ["*alice waves"]

    def test_cursor_inside_mention(self, theme):
        out = render_preview(["hi @bob"], 0, "alice", {"bob"}, 40, theme=theme)
        mention = out.rows[0][-1]
        assert mention.text == "@bob" + CURSOR_SENTINEL
        assert mention.style == theme.username_style("bob")

    def test_window_follows_cursor(self, theme):
        lines = [f"line {i}" for i in range(10)]
        out = render_preview(lines, 8, "alice", set(), 40, max_height=3, theme=theme)
        assert out.height == 3
        assert out.cursor_row == 2
        assert plain(out)[-1].strip() == "line 8"


class TestPreviewWindow:
    def _rows(self, n, cursor):
        return RenderedLines(
            tuple(
                (StyledRun(str(i) + (CURSOR_SENTINEL if i == cursor else "")),) for i in range(n)
            )
        )

    def test_fits(self):
        body = self._rows(3, 0)
        assert preview_window(body, 5) is body

    def test_cursor_near_top_shows_top(self):
        assert plain(preview_window(self._rows(10, 1), 3)) == ["0", "1", "2"]

    def test_cursor_at_bottom(self):
        assert plain(preview_window(self._rows(10, 9), 3)) == ["7", "8", "9"]

    def test_no_cursor_shows_top(self):
        rows = RenderedLines(tuple((StyledRun(str(i)),) for i in range(6)))
        assert plain(preview_window(rows, 2)) == ["0", "1"]
