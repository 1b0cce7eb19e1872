import json
import logging
import unittest

from yolo_counter.log import JsonFormatter, get_logger, setup_logging


class TestLogging(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self._handlers = list(root.handlers)
        self._level = root.level

    def tearDown(self) -> None:
        root = logging.getLogger()
        root.handlers[:] = self._handlers
        root.setLevel(self._level)

    def test_json_formatter(self) -> None:
        record = logging.LogRecord("yolo_counter.decode", logging.INFO, __file__, 1, "kept %d", (3,), None)
        payload = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["level"], "INFO")
        self.assertEqual(payload["logger"], "yolo_counter.decode")
        self.assertEqual(payload["msg"], "kept 3")
        self.assertIn("ts", payload)

    def test_setup_logging_installs_single_handler(self) -> None:
        setup_logging("debug", json_format=True)
        root = logging.getLogger()
        self.assertEqual(len(root.handlers), 1)
        self.assertIsInstance(root.handlers[0].formatter, JsonFormatter)
        self.assertEqual(root.level, logging.DEBUG)

    def test_get_logger(self) -> None:
        self.assertEqual(get_logger("yolo_counter.nms").name, "yolo_counter.nms")


if __name__ == "__main__":
    unittest.main()
