from collabgraph.report import main


def test_team_report(team_file, capsys):
    assert main([team_file]) == 0
    out = capsys.readouterr().out
    assert 'TEAM' in out
    assert 'members: 6, references: 11' in out
    assert 'carol' in out.split('BOTTLENECKS')[1]
    assert 'MEMBER' not in out


def test_member_report_with_weeks(weeks_file, capsys):
    assert main([weeks_file, '--member', 'carol']) == 0
    out = capsys.readouterr().out
    assert 'MEMBER carol (frontend)' in out
    assert 'week over week: inbound +4, outbound +1' in out
    assert '[warning] Bottleneck grew by 4 since the previous period' in out
