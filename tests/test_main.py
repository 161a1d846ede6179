import os
import tempfile
import unittest
from pathlib import Path
from src.harness.__main__ import load_scripts

SCRIPTS_DIR = Path(__file__).resolve().parent.parent / "scripts"

class TestLoadScripts(unittest.TestCase):
    def test_paths_only(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.txt', delete=False) as f:
            f.write("1,limit,bid,1,1-open,1\n")
            path = f.name
        try:
            scripts = load_scripts([path])
            self.assertEqual(scripts, [(Path(path).stem, "1,limit,bid,1,1-open,1\n")])
        finally:
            os.unlink(path)

    def test_directory_in_name_order(self):
        names = [name for name, _ in load_scripts([], str(SCRIPTS_DIR))]
        self.assertEqual(names, ["basic_limit", "ioc_fok", "price_time_priority"])

if __name__ == '__main__':
    unittest.main()
