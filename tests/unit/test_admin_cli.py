import json

from observability import admin_cli


def test_list_sessions_prints_recent(orchestrator, role_block, capsys):
    session_id = orchestrator.start_interview(role_block, user_id="u1")
    admin_cli.list_sessions(5)
    out = capsys.readouterr().out
    assert session_id in out
    assert "user=u1" in out
    assert "in_progress 0/5 v0" in out


def test_show_session_dumps_document(orchestrator, role_block, capsys):
    session_id = orchestrator.start_interview(role_block)
    admin_cli.show_session(session_id)
    document = json.loads(capsys.readouterr().out)
    assert document["session_id"] == session_id
    assert document["role_block"]["role_name"] == "Backend Engineer"


def test_show_session_missing(capsys):
    admin_cli.show_session("nope")
    assert "not found" in capsys.readouterr().out
