"""End-to-end tests of the browsing state machine with a scripted terminal."""

from gemlark.core import resolve
from gemlark.navigator import Navigator, State

from conftest import FakeClient, FakeTerminal, gemini_response


def gemtext(text: str) -> bytes:
    return gemini_response(20, "text/gemini", text.encode("utf-8"))


def browse(session, responses, start="gemini://h/", keys=b"q", answers=()):
    """Run a navigator from `start` until the scripted keys run out."""
    client = FakeClient(responses)
    terminal = FakeTerminal(keys=keys, answers=answers)
    navigator = Navigator(session, terminal, client=client)
    navigator.start(start)
    assert navigator.run() == 0
    assert navigator.state is State.DONE
    return client, terminal


def requested(client):
    return [request.decode().strip() for request in client.requests]


def history_paths(session):
    return [entry.path for entry in session.history.entries()]


class TestSuccess:
    def test_fetch_render_page_quit(self, session):
        client, terminal = browse(session, {"gemini://h/": gemtext("# Home\n=> a A\n")})

        assert session.current_url == resolve("gemini://h/")
        assert [link.target for link in session.page.links] == ["a"]
        assert terminal.titles == ["Home [utf8]"]
        assert history_paths(session) == [""]

    def test_non_gemtext_is_shown_unrendered(self, session):
        responses = {"gemini://h/": gemini_response(20, "text/plain", b"=> not a link\n")}
        browse(session, responses)
        assert session.page.lines == ["=> not a link"]
        assert session.page.links == []
        assert session.page.mime == "text/plain"

    def test_charset_is_recorded(self, session):
        responses = {"gemini://h/": gemini_response(20, "text/gemini; charset=ISO-8859-1", b"# T\n")}
        _, terminal = browse(session, responses)
        assert session.page.charset == "iso8859"
        assert terminal.titles == ["T [iso8859]"]


class TestNavigation:
    def test_follow_link_then_back(self, session):
        responses = {
            "gemini://h/": gemtext("=> page2 Two\n"),
            "gemini://h/page2": gemtext("# Two\n"),
        }
        client, _ = browse(session, responses, keys=b"gbq", answers=["1"])

        assert requested(client) == ["gemini://h/", "gemini://h/page2", "gemini://h/"]
        assert session.current_url == resolve("gemini://h/")
        assert history_paths(session) == [""]

    def test_back_after_several_navigations(self, session):
        responses = {
            "gemini://h/": gemtext("=> p1\n"),
            "gemini://h/p1": gemtext("=> p2\n"),
            "gemini://h/p2": gemtext("=> p3\n"),
            "gemini://h/p3": gemtext("# end\n"),
        }
        browse(session, responses, keys=b"gggbq", answers=["1", "1", "1"])

        # Three navigations after the first page, then back: one page back,
        # and the re-fetch brings the stack back to three entries.
        assert session.current_url == resolve("gemini://h/p2")
        assert history_paths(session) == ["", "p1", "p2"]

    def test_link_out_of_range_stays_on_page(self, session):
        client, _ = browse(session, {"gemini://h/": gemtext("=> a\n")}, keys=b"gq", answers=["9"])
        assert requested(client) == ["gemini://h/"]
        assert session.current_url == resolve("gemini://h/")

    def test_refresh_pushes_again(self, session):
        client, _ = browse(session, {"gemini://h/": gemtext("x\n")}, keys=b"rq")
        assert requested(client) == ["gemini://h/", "gemini://h/"]
        assert history_paths(session) == ["", ""]

    def test_go_up(self, session):
        responses = {
            "gemini://h/a/b": gemtext("b\n"),
            "gemini://h/a/": gemtext("a\n"),
        }
        browse(session, responses, start="gemini://h/a/b", keys=b"uq")
        assert session.current_url == resolve("gemini://h/a/")

    def test_home(self, session):
        responses = {
            "gemini://h/": gemtext("x\n"),
            "gemini://home.example/": gemtext("# Home\n"),
        }
        browse(session, responses, keys=b"hq")
        assert session.current_url == resolve("gemini://home.example/")

    def test_open_url_prompt(self, session):
        responses = {
            "gemini://h/": gemtext("x\n"),
            "gemini://other.example/page": gemtext("y\n"),
        }
        browse(session, responses, keys=b"oq", answers=["other.example/page"])
        assert session.current_url == resolve("gemini://other.example/page")


class TestRedirects:
    def test_redirect_is_followed_and_replaced_in_history(self, session):
        responses = {
            "gemini://h/old": gemini_response(30, "/new"),
            "gemini://h/new": gemtext("# New\n"),
        }
        client, _ = browse(session, responses, start="gemini://h/old")

        assert requested(client) == ["gemini://h/old", "gemini://h/new"]
        assert session.current_url == resolve("gemini://h/new")
        assert history_paths(session) == ["new"]

    def test_redirect_loop_gives_up(self, session):
        responses = {"gemini://h/loop": gemini_response(31, "loop")}
        client, terminal = browse(session, responses, start="gemini://h/loop", keys=b"xq")

        assert len(client.requests) == Navigator.MAX_REDIRECTS + 1
        assert "Gave up" in terminal.messages[0][0]
        assert len(session.history) == 0


class TestInput:
    def test_input_is_sent_as_query(self, session):
        responses = {
            "gemini://h/search": gemini_response(10, "Query"),
            "gemini://h/search?a%20b": gemtext("results\n"),
        }
        client, terminal = browse(session, responses, start="gemini://h/search", answers=["a b"])

        assert terminal.prompts == [("Query: ", True)]
        assert session.current_url == resolve("gemini://h/search?a%20b")
        assert history_paths(session) == ["search"]

    def test_sensitive_input_is_not_echoed(self, session):
        responses = {
            "gemini://h/login": gemini_response(11, "Password"),
            "gemini://h/login?hunter2": gemtext("welcome\n"),
        }
        _, terminal = browse(session, responses, start="gemini://h/login", answers=["hunter2"])
        assert terminal.prompts == [("Password: ", False)]

    def test_empty_input_cancels(self, session):
        responses = {"gemini://h/search": gemini_response(10, "Query")}
        client, _ = browse(session, responses, start="gemini://h/search", answers=[""])
        assert len(client.requests) == 1
        assert len(session.history) == 0


class TestFailures:
    def test_not_found_falls_back_to_previous_entry(self, session):
        responses = {
            "gemini://h/": gemtext("=> missing\n"),
            "gemini://h/missing": gemini_response(51, "Not here"),
        }
        client, terminal = browse(session, responses, keys=b"gxq", answers=["1"])

        assert requested(client) == ["gemini://h/", "gemini://h/missing", "gemini://h/"]
        assert terminal.messages[0][0] == "51 Not found: Not here"
        assert session.current_url == resolve("gemini://h/")
        assert history_paths(session) == [""]

    def test_temporary_failure_keeps_page_without_refetch(self, session):
        responses = {
            "gemini://h/": gemtext("# Home\n=> busy\n"),
            "gemini://h/busy": gemini_response(44, "Wait 10s"),
        }
        client, terminal = browse(session, responses, keys=b"gxq", answers=["1"])

        assert requested(client) == ["gemini://h/", "gemini://h/busy"]
        assert terminal.messages[0][0] == "44 Slow down: Wait 10s"
        assert session.current_url == resolve("gemini://h/")
        assert session.page.title == "Home"
        assert history_paths(session) == [""]

    def test_bad_request_shows_reason(self, session):
        responses = {
            "gemini://h/": gemtext("=> bad\n"),
            "gemini://h/bad": gemini_response(59, "Malformed URL"),
        }
        _, terminal = browse(session, responses, keys=b"gxq", answers=["1"])
        assert terminal.messages[0][0] == "59 Bad request: Malformed URL"

    def test_connection_failure_on_first_fetch(self, session):
        _, terminal = browse(session, {}, start="gemini://down/", keys=b"xq")

        assert terminal.messages[0][0].startswith("Failed to connect to down:1965")
        assert session.page.lines[0].startswith("Failed to connect")
        assert len(session.history) == 0

    def test_unsupported_scheme_goes_two_entries_back(self, session):
        responses = {
            "gemini://h/": gemtext("=> b\n"),
            "gemini://h/b": gemtext("=> https://web.example/\n"),
        }
        client, terminal = browse(session, responses, keys=b"ggxq", answers=["1", "1"])

        assert "Unsupported scheme" in terminal.messages[0][0]
        assert requested(client) == ["gemini://h/", "gemini://h/b", "gemini://h/"]
        assert session.current_url == resolve("gemini://h/")

    def test_opaque_scheme_link_goes_back(self, session):
        responses = {
            "gemini://h/": gemtext("=> b\n"),
            "gemini://h/b": gemtext("=> mailto:me@x.org Write to me\n"),
        }
        client, terminal = browse(session, responses, keys=b"ggxq", answers=["1", "1"])

        assert terminal.messages[0][0] == "Unsupported scheme 'mailto': mailto:me@x.org"
        assert requested(client) == ["gemini://h/", "gemini://h/b", "gemini://h/"]

    def test_invalid_host_name_keeps_page(self, session):
        responses = {"gemini://h/": gemtext("# Home\n=> gemini://a..b/\n")}
        client, terminal = browse(session, responses, keys=b"gxq", answers=["1"])

        assert "Invalid host name" in terminal.messages[0][0]
        assert requested(client) == ["gemini://h/"]
        assert session.page.title == "Home"

    def test_non_ascii_digit_link_number_stays_on_page(self, session):
        client, _ = browse(session, {"gemini://h/": gemtext("=> a\n")}, keys=b"gq", answers=["\u00b2"])
        assert requested(client) == ["gemini://h/"]
        assert session.current_url == resolve("gemini://h/")

    def test_unresolvable_link_on_local_document(self, session):
        client = FakeClient()
        terminal = FakeTerminal(keys=b"gxq", answers=["1"])
        navigator = Navigator(session, terminal, client=client)

        navigator.open_document("# Local\n=> /abs\n", title="local.gmi")
        navigator.run()

        assert session.current_url is None
        assert session.page.title == "Local"
        assert "No host" in terminal.messages[0][0]
        assert client.requests == []


class TestCertificates:
    def test_retry_then_go_back(self, session):
        responses = {
            "gemini://h/": gemtext("=> private\n"),
            "gemini://h/private": gemini_response(60, "Identify yourself"),
        }
        client, terminal = browse(session, responses, keys=b"grxq", answers=["1"])

        assert requested(client) == [
            "gemini://h/",
            "gemini://h/private",
            "gemini://h/private",
            "gemini://h/",
        ]
        first = "\n".join(terminal.messages[0])
        assert "60 Client certificate required: Identify yourself" in first
        assert "openssl req" in first
        assert session.current_url == resolve("gemini://h/")
        assert history_paths(session) == [""]

    def test_registered_certificate_is_presented(self, session):
        certs = session.certificates.cert_dir
        certs.mkdir(parents=True)
        (certs / "h.crt").write_text("cert")
        (certs / "h.key").write_text("key")

        client, _ = browse(session, {"gemini://h/": gemtext("x\n")})
        assert client.certificates[0].host == "h"
