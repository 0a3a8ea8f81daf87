import unittest

from sanskriti.lang.translator import KEYWORDS, translate


class TranslatorTestCase(unittest.TestCase):

    def test_keywords(self):
        for keyword, canonical in KEYWORDS.items():
            self.assertEqual(canonical, translate(keyword), keyword)
            self.assertEqual(f"{canonical} {canonical}", translate(f"{keyword} {keyword}"), keyword)

    def test_programs(self):
        cases = {
            "चर x = 1; कथय x;": "var x = 1; print x;",
            "यदि (x) कथय सत्य; अथ्वा कथय असत्य;": "if (x) print true; else print false;",
            "यावद (x < 3) x = x + 1;": "while (x < 3) x = x + 1;",
            "पुरा (चर i = 0; i < 3; i = i + 1) कथय i;": "for (var i = 0; i < 3; i = i + 1) print i;",
            "x = नेति विकल्प 1;": "x = nil or 1;",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, translate(case), case)

    def test_longest_first(self):
        self.assertEqual("false", translate("असत्य"))
        self.assertEqual("true false", translate("सत्य असत्य"))
        self.assertEqual("falsetrue", translate("असत्यसत्य"))

    def test_verbatim(self):
        cases = {
            "print \"कथय\";": "print \"print\";",  # also inside strings
            "var चरम = 1;": "var varम = 1;",       # and inside identifiers
            "print 1;": "print 1;",
            "": "",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, translate(case), case)

    def test_custom_keywords(self):
        self.assertEqual("print 1;", translate("say 1;", {"say": "print"}))
        self.assertEqual("कथय 1;", translate("कथय 1;", {}))


if __name__ == '__main__':
    unittest.main()
