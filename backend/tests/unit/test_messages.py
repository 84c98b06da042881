"""Tests for user-visible messages."""

from vcnotebook.client.messages import MessageLevel, Notifier


def test_listener_receives_messages():
    received = []
    notifier = Notifier(listener=received.append)
    notifier.success("Note saved successfully!")
    notifier.error("Error deleting note")

    assert [m.text for m in received] == ["Note saved successfully!", "Error deleting note"]
    assert notifier.last.level == MessageLevel.ERROR
    assert [m.text for m in notifier.errors()] == ["Error deleting note"]


def test_history_is_bounded():
    notifier = Notifier(maxlen=3)
    for i in range(5):
        notifier.info(str(i))
    assert [m.text for m in notifier.messages] == ["2", "3", "4"]
