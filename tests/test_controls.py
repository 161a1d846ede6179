import unittest
from unittest.mock import MagicMock
from src.core.errors import UnknownCommandError
from src.harness.controls import apply_command

class TestOperatorControls(unittest.TestCase):
    def setUp(self):
        self.controller = MagicMock()

    def test_aliases(self):
        self.assertEqual(apply_command(self.controller, "p\n"), "pause")
        self.controller.pause.assert_called_once()
        self.assertEqual(apply_command(self.controller, "S"), "step")
        self.controller.step.assert_called_once()
        self.assertEqual(apply_command(self.controller, "+"), "faster")
        self.controller.faster.assert_called_once()

    def test_bare_enter_toggles(self):
        self.assertEqual(apply_command(self.controller, "\n"), "toggle")
        self.controller.toggle_pause.assert_called_once()

    def test_delay(self):
        apply_command(self.controller, "delay 250")
        self.controller.set_delay.assert_called_once_with(250.0)
        apply_command(self.controller, "d 0")
        self.controller.set_delay.assert_called_with(0.0)

    def test_delay_needs_number(self):
        with self.assertRaises(UnknownCommandError):
            apply_command(self.controller, "delay")
        with self.assertRaises(UnknownCommandError):
            apply_command(self.controller, "delay soon")

    def test_delay_rejects_negative_and_non_finite(self):
        for line in ("d -5", "d nan", "delay inf"):
            with self.assertRaises(UnknownCommandError):
                apply_command(self.controller, line)
        self.controller.set_delay.assert_not_called()

    def test_delay_rejected_by_controller(self):
        self.controller.set_delay.side_effect = ValueError("delay_ms must be >= 0")
        with self.assertRaises(UnknownCommandError):
            apply_command(self.controller, "d 5")

    def test_unknown(self):
        with self.assertRaises(UnknownCommandError):
            apply_command(self.controller, "rewind")

if __name__ == '__main__':
    unittest.main()
