"""Talent name normalization.

Products name their talent either in ``vendor`` (usually English) or, for
the generic storefront vendor, in a ``Talent_<name>`` tag that is often
Japanese. Both spellings are folded into one English display name so the
browser's talent filter shows each talent once.
"""

import re
from typing import Dict, Iterable, List, Mapping, Optional

__all__ = [
    "TALENT_JP_TO_EN",
    "TALENT_TAG_PREFIX",
    "BILINGUAL_SEPARATORS",
    "UNKNOWN_TALENT",
    "is_generic_vendor",
    "english_only",
    "resolve_talent",
    "build_search_terms",
]

UNKNOWN_TALENT = "—"
TALENT_TAG_PREFIX = "Talent_"

# Separators between the English and Japanese halves of a composite name,
# e.g. "English / 日本語" or "English（日本語）"
BILINGUAL_SEPARATORS = (" / ", "／", "（", " (")

_GENERIC_VENDOR_RE = re.compile(r"hololive production official shop", re.IGNORECASE)

TALENT_JP_TO_EN: Dict[str, str] = {
    # Gen 0
    "ときのそら": "Tokino Sora",
    "ロボ子さん": "Roboco",
    "さくらみこ": "Sakura Miko",
    "星街すいせい": "Hoshimachi Suisei",
    # Gen 1
    "白上フブキ": "Shirakami Fubuki",
    "夏色まつり": "Natsuiro Matsuri",
    "アキ・ローゼンタール": "Aki Rosenthal",
    "赤井はあと": "Akai Haato",
    # Gen 2
    "百鬼あやめ": "Nakiri Ayame",
    "癒月ちょこ": "Yuzuki Choco",
    "大空スバル": "Oozora Subaru",
    # Gamers
    "大神ミオ": "Ookami Mio",
    "猫又おかゆ": "Nekomata Okayu",
    "戌神ころね": "Inugami Korone",
    # Gen 3
    "兎田ぺこら": "Usada Pekora",
    "不知火フレア": "Shiranui Flare",
    "白銀ノエル": "Shirogane Noel",
    "宝鐘マリン": "Houshou Marine",
    # Gen 4
    "角巻わため": "Tsunomaki Watame",
    "常闇トワ": "Tokoyami Towa",
    "姫森ルーナ": "Himemori Luna",
    # Gen 5
    "雪花ラミィ": "Yukihana Lamy",
    "桃鈴ねね": "Momosuzu Nene",
    "獅白ぼたん": "Shishiro Botan",
    "尾丸ポルカ": "Omaru Polka",
    # holoX
    "ラプラス・ダークネス": "La+ Darknesss",
    "鷹嶺ルイ": "Takane Lui",
    "博衣こより": "Hakui Koyori",
    "沙花叉クロヱ": "Sakamata Chloe",
    "風真いろは": "Kazama Iroha",
    # ID Gen 1
    "アユンダ・リス": "Ayunda Risu",
    "ムーナ・ホシノヴァ": "Moona Hoshinova",
    "アイラニ・イオフィフティーン": "Airani Iofifteen",
    # ID Gen 2
    "クレイジー・オリー": "Kureiji Ollie",
    "アーニャ・メルフィッサ": "Anya Melfissa",
    "パヴォリア・レイネ": "Pavolia Reine",
    # ID Gen 3
    "ベスティア・ゼータ": "Vestia Zeta",
    "カエラ・コヴァルスキア": "Kaela Kovalskia",
    "こぼ・かなえる": "Kobo Kanaeru",
    # EN Myth
    "森カリオペ": "Mori Calliope",
    "小鳥遊キアラ": "Takanashi Kiara",
    "一伊那尓栖": "Ninomae Ina'nis",
    "ワトソン・アメリア": "Watson Amelia",
    "がうる・ぐら": "Gawr Gura",
    # EN Promise
    "オーロ・クロニー": "Ouro Kronii",
    "ハコス・ベールズ": "Hakos Baelz",
    # EN Advent
    "シオリ・ノヴェラ": "Shiori Novella",
    "古石ビジュー": "Koseki Bijou",
    "ネリッサ・レイヴンクロフト": "Nerissa Ravencroft",
    "フワワ・アビスガード": "Fuwawa Abyssgard",
    "モココ・アビスガード": "Mococo Abyssgard",
    # EN Justice
    "エリザベス・ローズ・ブラッドフレイム": "Elizabeth Rose Bloodflame",
    "ジジ・ムリン": "Gigi Murin",
    "セシリア・イマーグリーン": "Cecilia Immergreen",
    "ラオーラ・パンテーラ": "Raora Panthera",
    # ReGLOSS
    "音乃瀬奏": "Otonose Kanade",
    "一条莉々華": "Ichijou Ririka",
    "儒烏風亭らでん": "Juufuutei Raden",
    "轟はじめ": "Todoroki Hajime",
    # FLOW GLOW
    "響咲リオナ": "Isaki Riona",
    "虎金妃笑虎": "Koganei Niko",
    "水宮枢": "Mizumiya Su",
    "輪堂千速": "Rindo Chihaya",
    "綺々羅々ヴィヴィ": "Kikirara Vivi",
    # HOLOSTARS 1st
    "花咲みやび": "Hanasaki Miyabi",
    "奏手イヅル": "Kanade Izuru",
    "アルランディス": "Arurandeisu",
    "リッカロイド": "Rikkaroid",
    # HOLOSTARS 2nd
    "アステル・レダ": "Astel Leda",
    "岸堂テンマ": "Kishido Temma",
    "夕刻ロベル": "Yukoku Roberu",
    # HOLOSTARS 3rd
    "影山シエン": "Kageyama Shien",
    "荒咬オウガ": "Aragami Oga",
    # UPROAR!!
    "矢戸乃上フウマ": "Yatogami Fuma",
    "宇佐美うゆ": "Utsugi Uyu",
    "水無世燐央": "Minase Rio",
    # Tempus
    "レギス・アルテア": "Regis Altare",
    "アキロゼ": "Axel Syrios",
    "ガヴィス・ベッテル": "Gavis Bettel",
    "マキナ・X・フレオン": "Machina X Flayon",
    "斑目ハッカ": "Banzoin Hakka",
    "定利シュンリ": "Josuiji Shinri",
    # Armis
    "ジュラルド・ティー・レクスフォード": "Jurard T Rexford",
    "ゴールドブレット": "Goldbullet",
    "オクタビオ": "Octavio",
    "クリムゾン・ルーズ": "Crimzon Ruze",
    # Alumni (may still appear in the shop)
    "湊あくあ": "Minato Aqua",
    "紫咲シオン": "Murasaki Shion",
    "天音かなた": "Amane Kanata",
    "桐生ココ": "Kiryu Coco",
    "セレス・ファウナ": "Ceres Fauna",
    "七詩ムメイ": "Nanashi Mumei",
    "火威青": "Hiodoshi Ao",
    "春先のどか": "Harusaki Nodoka",
    "九十九佐命": "Tsukumo Sana",
    "ヨゾラ・メル": "Yozora Mel",
}


def is_generic_vendor(vendor: str) -> bool:
    """True for the storefront's own name, which says nothing about the talent."""
    return not vendor or bool(_GENERIC_VENDOR_RE.search(vendor))


def english_only(name: str) -> str:
    """Return the leading (English) half of a bilingual composite name."""
    text = (name or "").strip()
    for sep in BILINGUAL_SEPARATORS:
        i = text.find(sep)
        if i > 0:
            return text[:i].strip()
    return text


def resolve_talent(
    vendor: str,
    tags: Iterable[str],
    name_map: Optional[Mapping[str, str]] = None,
) -> str:
    """Resolve a product's canonical talent display name.

    Prefers a non-generic vendor; otherwise the first ``Talent_`` tag. The
    result is reduced to its English half and mapped through ``name_map``
    (default ``TALENT_JP_TO_EN``). Returns ``"—"`` when nothing is known.
    """
    if name_map is None:
        name_map = TALENT_JP_TO_EN

    vendor = (vendor or "").strip()
    if not is_generic_vendor(vendor):
        raw = vendor
    else:
        talent_tag = next((str(t) for t in tags if str(t).startswith(TALENT_TAG_PREFIX)), None)
        raw = talent_tag[len(TALENT_TAG_PREFIX):].strip() if talent_tag else vendor

    raw = english_only(raw)
    if not raw:
        return UNKNOWN_TALENT
    return name_map.get(raw, raw)


def build_search_terms(
    name_map: Mapping[str, str],
    talents_seen: Iterable[str],
) -> Dict[str, List[str]]:
    """Build ``{english_name: [english_name, *aliases]}`` for talent matching.

    Every talent in ``talents_seen`` gets an entry, defaulting to itself.
    """
    aliases: Dict[str, List[str]] = {}
    for localized, english in name_map.items():
        aliases.setdefault(english, []).append(localized)

    terms: Dict[str, List[str]] = {
        english: [english] + localized for english, localized in aliases.items()
    }
    for talent in talents_seen:
        if talent and talent not in terms:
            terms[talent] = [talent]
    return terms
