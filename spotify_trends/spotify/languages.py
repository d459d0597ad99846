"""
Supported languages and their trending-query keywords

The Spotify Web API has no trending endpoint, so each language carries a fixed,
ordered list of search keywords used as a proxy for "what is popular right now".
The table is static; order matters because the aggregator gives precedence to
tracks found by earlier keywords.
"""

import re
from enum import Enum
from typing import Dict, List, Optional, Pattern, Tuple


class Language(Enum):
    """
    Closed enumeration of selectable languages

    Values are locale codes. Members are looked up by name ("hindi") or by
    code ("hi") through from_name().
    """
    ENGLISH = "en"
    HINDI = "hi"
    TAMIL = "ta"
    TELUGU = "te"
    KANNADA = "kn"
    MALAYALAM = "ml"
    BENGALI = "bn"
    MARATHI = "mr"
    GUJARATI = "gu"
    PUNJABI = "pa"
    SPANISH = "es"
    FRENCH = "fr"
    GERMAN = "de"
    ITALIAN = "it"
    PORTUGUESE = "pt"
    KOREAN = "ko"
    JAPANESE = "ja"
    CHINESE = "zh"

    @property
    def display_name(self) -> str:
        """Label in the language's own script"""
        return _LANGUAGE_TABLE[self][0]

    @property
    def trending_queries(self) -> List[str]:
        """Ordered keyword list (a fresh copy, the table itself is immutable)"""
        return list(_LANGUAGE_TABLE[self][1])

    @property
    def market(self) -> str:
        """
        Catalog market code used to bias results towards the language

        Spotify is not available in mainland China, so Chinese uses TW.
        """
        return _LANGUAGE_TABLE[self][2]

    @property
    def seed_artists(self) -> List[str]:
        """Well-known artists of the language, used to top up a strict trending set"""
        return list(_LANGUAGE_TABLE[self][3])

    @property
    def script_pattern(self) -> Optional[Pattern[str]]:
        """Pattern matching a character of the language's script, None for Latin-script languages"""
        return _SCRIPT_PATTERNS.get(self)

    def matches_script(self, text: Optional[str]) -> bool:
        """True when the text contains the language's script (always true for Latin-script languages)"""
        pattern = self.script_pattern
        if pattern is None:
            return True
        return bool(text) and pattern.search(text) is not None

    @property
    def key(self) -> str:
        """Lower-case member name, the form used in configuration files"""
        return self.name.lower()

    @classmethod
    def from_name(cls, value: str) -> 'Language':
        """
        Resolve a language from its name or locale code

        Args:
            value: "english", "English", "en", ...

        Returns:
            Matching Language member

        Raises:
            ValueError: If the value names no supported language
        """
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower()
        for language in cls:
            if normalized in (language.key, language.value):
                return language
        raise ValueError(f"Unsupported language: {value!r}")

    @classmethod
    def default(cls) -> 'Language':
        return cls.ENGLISH


_IN = "IN"

# display name, trending queries, market, seed artists
_LANGUAGE_TABLE: Dict[Language, Tuple[str, Tuple[str, ...], str, Tuple[str, ...]]] = {
    Language.ENGLISH: (
        "English",
        ("english hits", "top hits usa", "billboard hot 100", "today's top hits",
         "new music friday", "viral usa"),
        "US",
        ("Taylor Swift", "Drake", "The Weeknd", "Ed Sheeran", "Billie Eilish"),
    ),
    Language.HINDI: (
        "हिन्दी",
        ("हिंदी गाने", "बॉलीवुड", "नए हिंदी गाने", "ट्रेंडिंग हिंदी", "देसी पॉप"),
        _IN,
        ("Arijit Singh", "Badshah", "Shreya Ghoshal", "Neha Kakkar", "Jubin Nautiyal"),
    ),
    Language.TAMIL: (
        "தமிழ்",
        ("தமிழ் பாடல்கள்", "கோலிவுட்", "புதிய தமிழ் பாடல்கள்", "டிரென்டிங் தமிழ்",
         "தமிழ் ஹிட்ஸ்"),
        _IN,
        ("Anirudh Ravichander", "A. R. Rahman", "Sid Sriram", "Yuvan Shankar Raja", "Dhanush"),
    ),
    Language.TELUGU: (
        "తెలుగు",
        ("తెలుగు పాటలు", "టాలీవుడ్", "కొత్త తెలుగు పాటలు", "ట్రెండింగ్ తెలుగు", "తెలుగు హిట్స్"),
        _IN,
        ("Devi Sri Prasad", "Thaman S", "Sid Sriram", "Anirudh Ravichander", "Armaan Malik"),
    ),
    Language.KANNADA: (
        "ಕನ್ನಡ",
        ("ಕನ್ನಡ ಹಾಡುಗಳು", "ಸ್ಯಾಂಡಲ್ವುಡ್", "ಹೊಸ ಕನ್ನಡ ಹಾಡುಗಳು", "ಟ್ರೆಂಡಿಂಗ್ ಕನ್ನಡ", "ಕನ್ನಡ ಹಿಟ್ಸ್"),
        _IN,
        ("Arjun Janya", "Vijay Prakash", "Charan Raj", "Anirudh Shastry", "Vasuki Vaibhav"),
    ),
    Language.MALAYALAM: (
        "മലയാളം",
        ("മലയാളം പാട്ടുകൾ", "മോളിവുഡ്", "പുതിയ മലയാളം പാട്ടുകൾ", "ട്രെൻഡിംഗ് മലയാളം",
         "മലയാളം ഹിറ്റ്സ്"),
        _IN,
        ("Vineeth Sreenivasan", "Sushin Shyam", "Sithara Krishnakumar", "KS Harisankar",
         "Shreya Ghoshal"),
    ),
    Language.BENGALI: (
        "বাংলা",
        ("বাংলা গান", "ট্রেন্ডিং বাংলা", "নতুন বাংলা গান", "বাংলা হিটস"),
        _IN,
        ("Arijit Singh", "Shreya Ghoshal", "Anupam Roy", "Ishan Mitra", "Lagnajita Chakraborty"),
    ),
    Language.MARATHI: (
        "मराठी",
        ("मराठी गाणी", "ट्रेंडिंग मराठी", "नवीन मराठी गाणी", "मराठी हिट्स"),
        _IN,
        ("Ajay-Atul", "Shankar Mahadevan", "Avadhoot Gupte", "Sonu Nigam", "Shreya Ghoshal"),
    ),
    Language.GUJARATI: (
        "ગુજરાતી",
        ("ગુજરાતી ગીત", "ટ્રેન્ડિંગ ગુજરાતી", "નવા ગુજરાતી ગીત", "ગુજરાતી હિટ્સ"),
        _IN,
        ("Sachin-Jigar", "Aishwarya Majmudar", "Kinjal Dave", "Jigardan Gadhavi", "Kirtidan Gadhvi"),
    ),
    Language.PUNJABI: (
        "ਪੰਜਾਬੀ",
        ("ਪੰਜਾਬੀ ਗਾਣੇ", "ਭਾਂਗੜਾ", "ਨਵੇਂ ਪੰਜਾਬੀ ਗਾਣੇ", "ਟ੍ਰੈਂਡਿੰਗ ਪੰਜਾਬੀ", "ਪੰਜਾਬੀ ਹਿੱਟਸ"),
        _IN,
        ("Sidhu Moose Wala", "AP Dhillon", "Diljit Dosanjh", "Karan Aujla", "Shubh"),
    ),
    Language.SPANISH: (
        "Español",
        ("éxitos españa", "música latina", "reggaetón", "top españa", "novedades viernes"),
        "ES",
        ("Bad Bunny", "Rosalía", "Quevedo", "Karol G", "J Balvin"),
    ),
    Language.FRENCH: (
        "Français",
        ("chanson française", "rap français", "hits france", "nouveautés", "top france"),
        "FR",
        ("Aya Nakamura", "PNL", "Stromae", "GIMS", "Ninho"),
    ),
    Language.GERMAN: (
        "Deutsch",
        ("deutschrap", "german hits", "schlager", "top deutschland", "neuheiten"),
        "DE",
        ("Apache 207", "RAF Camora", "Capital Bra", "Bonez MC", "Loredana"),
    ),
    Language.ITALIAN: (
        "Italiano",
        ("hit italiani", "trap italiano", "nuove uscite", "top italia", "italian pop"),
        "IT",
        ("Sfera Ebbasta", "Måneskin", "Ultimo", "Lazza", "Mahmood"),
    ),
    Language.PORTUGUESE: (
        "Português",
        ("hits brasil", "funk brasileiro", "sertanejo", "mpb", "bossa nova"),
        "BR",
        ("Anitta", "Pedro Sampaio", "Gusttavo Lima", "Luan Santana", "Jão"),
    ),
    Language.KOREAN: (
        "한국어",
        ("케이팝", "K-pop", "인기 한국 노래", "한국 가요", "최신 한국 노래"),
        "KR",
        ("BTS", "BLACKPINK", "SEVENTEEN", "NewJeans", "IVE"),
    ),
    Language.JAPANESE: (
        "日本語",
        ("J-POP", "邦楽", "アニメソング", "日本のポップ", "最新 日本の歌"),
        "JP",
        ("YOASOBI", "Official HIGE DANDism", "Ado", "King Gnu", "LiSA"),
    ),
    Language.CHINESE: (
        "中文",
        ("华语 流行", "国语 歌曲", "粤语 歌曲", "华语 热门", "华语 新歌"),
        "TW",
        ("Jay Chou", "JJ Lin", "Eason Chan", "G.E.M.", "Mayday"),
    ),
}

_DEVANAGARI = re.compile(r"[\u0900-\u097F]")
_CJK_IDEOGRAPHS = r"\u4E00-\u9FFF"

# Latin-script languages have no entry: every title matches them
_SCRIPT_PATTERNS: Dict[Language, Pattern[str]] = {
    Language.HINDI: _DEVANAGARI,
    Language.MARATHI: _DEVANAGARI,
    Language.BENGALI: re.compile(r"[\u0980-\u09FF]"),
    Language.TAMIL: re.compile(r"[\u0B80-\u0BFF]"),
    Language.TELUGU: re.compile(r"[\u0C00-\u0C7F]"),
    Language.KANNADA: re.compile(r"[\u0C80-\u0CFF]"),
    Language.MALAYALAM: re.compile(r"[\u0D00-\u0D7F]"),
    Language.GUJARATI: re.compile(r"[\u0A80-\u0AFF]"),
    Language.PUNJABI: re.compile(r"[\u0A00-\u0A7F]"),
    Language.KOREAN: re.compile(r"[\u1100-\u11FF\u3130-\u318F\uAC00-\uD7AF]"),
    Language.JAPANESE: re.compile(r"[\u3040-\u309F\u30A0-\u30FF" + _CJK_IDEOGRAPHS + "]"),
    Language.CHINESE: re.compile("[" + _CJK_IDEOGRAPHS + "]"),
}
