import io

from alarms.command_router import View
from alarms.storage import Alarm
from terminal_ui import Frame, PlainScreen, alarm_table, body_lines


def test_alarm_table_layout():
    lines = alarm_table([(0, Alarm(7, 0, "Wake")), (1, Alarm(22, 5, "Bed"))])
    assert lines == ["#  HH:MM  Name", "0   7:00  Wake", "1  22:05  Bed"]


def test_body_lines_per_view():
    assert body_lines(Frame(clock=" 7:00:00")) == []
    assert body_lines(Frame(clock=" 7:00:00", view=View.HELP))[0] == "Key  Action"
    listing = body_lines(Frame(clock=" 7:00:00", view=View.LIST, alarms=[(0, Alarm(7, 0, "Wake"))]))
    assert listing[-1] == "0   7:00  Wake"


def test_plain_screen_prints_each_second_once():
    out = io.StringIO()
    screen = PlainScreen(stream=out)
    screen.draw(Frame(clock=" 7:00:00"))
    screen.draw(Frame(clock=" 7:00:00"))
    screen.draw(Frame(clock=" 7:00:01", ringing_name="Wake"))
    assert out.getvalue().splitlines() == [" 7:00:00", ' 7:00:01  ALARM!  name="Wake"']


def test_plain_screen_prints_message_and_body_on_change():
    out = io.StringIO()
    screen = PlainScreen(stream=out)
    frame = Frame(clock=" 7:00:00", message="Press ? for help.", view=View.HELP)
    screen.draw(frame)
    screen.draw(frame)
    lines = out.getvalue().splitlines()
    assert lines.count("Press ? for help.") == 1
    assert lines.count("Key  Action") == 1
