"""Regular-expression families for dates, contacts and addresses."""

import re

CJK = r"一-龥"

# ---------------------------------------------------------------------------
# Dates
# Accepts 2018, 2018年, 2018年9月, 2018.09, 2018/9, 2018-09-01, 2018年9月1日
# ---------------------------------------------------------------------------
_YEAR = r"(?<!\d)(?:19|20)\d{2}(?!\d)"
DATE_TOKEN = (
    _YEAR
    + r"(?:\s*[年./\-]\s*\d{1,2}(?!\d))?"
    + r"(?:\s*[月./\-]\s*\d{1,2}(?!\d))?"
    + r"\s*[年月日号]?"
)
CURRENT_WORDS = ("至今", "现在", "目前", "Present", "present", "Now", "now", "今")
_CURRENT = "|".join(CURRENT_WORDS)
_RANGE_SEP = r"\s*(?:-|–|—|~|～|至|到|\bto\b)\s*"

DATE_RANGE_RE = re.compile(rf"({DATE_TOKEN}){_RANGE_SEP}({DATE_TOKEN}|{_CURRENT})")
# A lone date that is unambiguous on its own: needs 年 or a month part.
DATE_RE = re.compile(
    _YEAR + r"(?:\s*年(?:\s*\d{1,2}\s*月)?|\s*[./\-]\s*\d{1,2}(?!\d)(?:\s*[./\-]\s*\d{1,2}(?!\d))?)"
)

# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------
PHONE_RE = re.compile(r"(?<!\d)(?:\+?86[-\s]?)?(1[3-9]\d[-\s]?\d{4}[-\s]?\d{4})(?!\d)")
MOBILE_RE = re.compile(r"^1(?:3\d|4[5-9]|5[0-35-9]|6[2567]|7[0-8]|8\d|9[0-35-9])\d{8}$")
EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
WECHAT_RE = re.compile(
    r"(?:微信号?|WeChat|Wechat|wechat|VX|vx|V信)\s*[:：]?\s*([a-zA-Z][a-zA-Z0-9_-]{5,19})"
)
QQ_RE = re.compile(r"(?:QQ|qq)号?\s*[:：]?\s*([1-9]\d{4,11})(?!\d)")
LINKEDIN_RE = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/in/[\w-]+", re.IGNORECASE)
GITHUB_RE = re.compile(r"(?:https?://)?(?:www\.)?github\.com/[\w-]+", re.IGNORECASE)
URL_RE = re.compile(r"https?://[^\s，。；、）)]+")

_CONTACT_FORMATS: dict[str, re.Pattern] = {
    "phone": MOBILE_RE,
    "email": re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"),
    "wechat": re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]{5,19}$"),
    "qq": re.compile(r"^[1-9]\d{4,11}$"),
}

# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------
PROVINCES = (
    "北京", "天津", "河北", "山西", "内蒙古", "辽宁", "吉林", "黑龙江", "上海", "江苏",
    "浙江", "安徽", "福建", "江西", "山东", "河南", "湖北", "湖南", "广东", "广西",
    "海南", "重庆", "四川", "贵州", "云南", "西藏", "陕西", "甘肃", "青海", "宁夏",
    "新疆", "台湾", "香港", "澳门",
)
MUNICIPALITIES = frozenset({"北京", "天津", "上海", "重庆"})
PROVINCE_RE = re.compile(
    rf"({'|'.join(PROVINCES)})"
    r"(省|市|壮族自治区|回族自治区|维吾尔自治区|自治区|特别行政区)?"
)
_CITY_RE = re.compile(rf"([{CJK}]{{1,6}}?市)")
_DISTRICT_RE = re.compile(rf"([{CJK}]{{1,6}}?[区县])")
FULL_ADDRESS_RE = re.compile(
    rf"(?:{'|'.join(PROVINCES)})[{CJK}0-9A-Za-z\-号路街道巷弄栋单元室]{{2,40}}"
)


def normalize_date(token: str) -> str:
    """``2018年9月`` -> ``2018-09``; a bare year stays ``2018``."""
    nums = re.findall(r"\d+", token)
    if not nums:
        return token.strip()
    year = nums[0]
    if len(nums) > 1 and 1 <= int(nums[1]) <= 12:
        return f"{year}-{int(nums[1]):02d}"
    return year


def parse_date_range(text: str) -> dict | None:
    """Find the first date range in ``text``.

    Returns ``{"start_date", "end_date", "is_current"}`` or None. An open-ended
    range (至今, Present, ...) has ``end_date="至今"`` and ``is_current=True``.
    """
    m = DATE_RANGE_RE.search(text)
    if not m:
        return None
    end = m.group(2)
    is_current = end.strip() in CURRENT_WORDS
    return {
        "start_date": normalize_date(m.group(1)),
        "end_date": "至今" if is_current else normalize_date(end),
        "is_current": is_current,
    }


def find_single_date(text: str) -> str | None:
    m = DATE_RE.search(text)
    return normalize_date(m.group()) if m else None


def has_date(text: str) -> bool:
    return bool(DATE_RANGE_RE.search(text) or DATE_RE.search(text))


def strip_dates(text: str) -> str:
    """Remove date ranges and lone dates, leaving the surrounding words."""
    text = DATE_RANGE_RE.sub(" ", text)
    text = DATE_RE.sub(" ", text)
    return re.sub(r"\s+", " ", text).strip(" |,，·-–—")


def normalize_phone(raw: str) -> str:
    return re.sub(r"[-\s]", "", raw)


def validate_contact(kind: str, value: str | None) -> bool:
    """Strict format check for one contact field."""
    if not value:
        return False
    pattern = _CONTACT_FORMATS.get(kind)
    if pattern is None:
        return False
    if kind == "phone":
        value = normalize_phone(value)
    return bool(pattern.match(value))


def normalize_address(text: str) -> dict[str, str | None]:
    """Resolve province/city/district from a free-text address."""
    result: dict[str, str | None] = {"province": None, "city": None, "district": None, "full": text}
    rest = text
    m = PROVINCE_RE.search(text)
    if m:
        province = m.group(1)
        result["province"] = province
        rest = text[m.end():]
        if province in MUNICIPALITIES:
            result["city"] = f"{province}市"
    if result["city"] is None:
        city = _CITY_RE.search(rest)
        if city:
            result["city"] = city.group(1)
            rest = rest[city.end():]
    district = _DISTRICT_RE.search(rest)
    if district:
        result["district"] = district.group(1)
    return result


# ---------------------------------------------------------------------------
# Line content
# ---------------------------------------------------------------------------
METRIC_RE = re.compile(
    r"\d+(?:\.\d+)?\+?\s*(?:%|％|万|千|百|亿|倍|人|天|小时|分钟|秒|毫秒|ms|用户|次|个|项|家)"
)
BULLET_RE = re.compile(r"^(?:[•\-–—►▪✓*○◆●■□→▸▹◇·]|\d{1,2}\s*[.、)）](?!\d))\s*")
TEAM_SIZE_RE = re.compile(r"(?:团队|小组|部门)[^0-9\n]{0,10}?(\d+)\s*(?:余|多)?\s*人")
SALARY_RE = re.compile(
    r"(?:薪资|薪酬|月薪|年薪|待遇)\s*[:：]?\s*"
    r"(\d+(?:\.\d+)?\s*[kKwW万千]?\s*(?:-|~|～|至)\s*\d+(?:\.\d+)?\s*[kKwW万千]?(?:\s*/\s*[月年])?)"
)
LOCATION_RE = re.compile(r"(?:工作地点|地点|城市|Location)\s*[:：]\s*([^\s，,;；|]{2,20})")


def strip_bullet(line: str) -> str:
    return BULLET_RE.sub("", line.strip()).strip()
