# app/services/divination/bazi_services.py
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from app.data.bazi import (
    FIVE_ELEMENTS,
    controls,
    earthly_branches,
    element_characteristics,
    generates,
    heavenly_stems,
)
from app.services.divination.question_analyzer import (
    QuestionAnalysis,
    analyze_question,
    contextual_opening,
)

logger = logging.getLogger(__name__)

BASE_YEAR = 1984
BASE_DAY = date(2000, 1, 1)
# 2000-01-01 is a 丙辰 day
BASE_DAY_STEM = 2
BASE_DAY_BRANCH = 4
DEFAULT_HOUR = 12

TEN_GOD_MEANINGS = {
    "比肩": "代表自我、竞争、独立。性格坚强，有主见，但可能固执。",
    "劫财": "代表合作、分享、竞争。善于交际，但需注意财务管理。",
    "食神": "代表才华、表达、享受。有艺术天赋，生活乐观。",
    "伤官": "代表创新、批判、表现。聪明才智，但需注意言行。",
    "偏财": "代表机遇、流动财富。善于把握机会，财运较好。",
    "正财": "代表稳定收入、勤劳。踏实工作，财富稳定增长。",
    "七杀": "代表压力、挑战、权威。有魄力，能克服困难。",
    "正官": "代表责任、地位、规范。有责任心，适合管理工作。",
    "偏印": "代表学习、思考、孤独。有学习能力，思维独特。",
    "正印": "代表智慧、保护、传承。有智慧，得长辈帮助。",
}

PILLAR_INFLUENCES = {
    "年": "在年柱出现，影响早年运势和祖辈关系。",
    "月": "在月柱出现，影响青年运势和父母兄弟关系。",
    "时": "在时柱出现，影响晚年运势和子女关系。",
}

LIUNIAN_EVENTS = {
    "正官": ("正官主贵，利于升职加薪，但需注意工作压力。", ("职位提升机会", "权威认可", "责任加重", "考试运佳")),
    "七杀": ("七杀主权，有挑战和压力，但也是突破的机会。", ("面临挑战", "竞争激烈", "需要魄力", "克服困难")),
    "正财": ("正财主富，财运稳定，适合稳健投资。", ("收入稳定", "投资机会", "理财得当", "财富增长")),
    "偏财": ("偏财当值，有意外之财，投资运佳。", ("意外收入", "投资机会", "商业合作", "财运亨通")),
    "正印": ("正印当值，利于学习进修，贵人相助。", ("学习机会", "贵人相助", "名声提升", "智慧增长")),
    "偏印": ("偏印当值，思维活跃，适合研究创新。", ("创新思维", "独特见解", "学习新知", "技能提升")),
    "食神": ("食神当值，心情愉悦，适合享受生活。", ("生活愉快", "艺术创作", "美食享受", "身心舒畅")),
    "伤官": ("伤官当值，才华展现，但需注意言行。", ("才华展现", "创意爆发", "表达欲强", "注意言行")),
    "比肩": ("比肩当值，竞争增加，需要独立自主。", ("竞争加剧", "独立发展", "自我提升", "朋友助力")),
    "劫财": ("劫财当值，合作机会多，但需注意财务。", ("合作机会", "团队协作", "注意财务", "分享资源")),
}

LIUNIAN_ADVICE = (
    (("正官", "七杀"), ("把握事业机会，勇于承担责任", "注意身体健康，避免过度劳累", "处理好上下级关系，获得认可")),
    (("正财", "偏财"), ("理性投资理财，把握财运机会", "开源节流，积累财富", "注意合同细节，避免财务纠纷")),
    (("正印", "偏印"), ("多学习充电，提升专业能力", "寻求贵人帮助，虚心请教", "注重精神修养，提升智慧")),
    (("食神", "伤官"), ("发挥创意才华，展现个人特色", "注意言行举止，避免口舌是非", "享受生活乐趣，保持身心愉悦")),
)
DEFAULT_LIUNIAN_ADVICE = ("加强自我修炼，提升竞争力", "注意团队合作，互利共赢", "保持稳定心态，顺势而为")

PEACH_BLOSSOM_BRANCHES = ("子", "午", "卯", "酉")
CANOPY_BRANCHES = ("辰", "戌", "丑", "未")
NOBLE_DAY_BRANCHES = ("丑", "未", "子", "申")
SCHOLAR_DAY_STEMS = ("甲", "乙", "丙", "丁")


class Pillar(BaseModel):
    stem: Dict[str, Any]
    branch: Dict[str, Any]
    name: str


class BaziChart(BaseModel):
    year: Pillar
    month: Pillar
    day: Pillar
    hour: Pillar

    @property
    def pillars(self) -> List[Pillar]:
        return [self.year, self.month, self.day, self.hour]


class ElementAnalysis(BaseModel):
    distribution: Dict[str, int]
    dominant: str
    lacking: List[str]
    balance: Optional[str] = None


class BaziFortune(BaseModel):
    career: str
    wealth: str
    health: str
    relationships: str


class TenGod(BaseModel):
    name: str
    element: str
    meaning: str
    influence: str


class TenGodsAnalysis(BaseModel):
    day_master: str
    gods: List[TenGod]
    dominant: str
    interpretation: str


class SpiritsAnalysis(BaseModel):
    auspicious: List[str]
    inauspicious: List[str]
    interpretation: str


class UseGodAnalysis(BaseModel):
    use_god: str
    avoid_god: str
    recommendation: str


class DayunAnalysis(BaseModel):
    current: Dict[str, str]
    influence: str
    favorable: bool
    ten_god: str
    interpretation: str


class LiunianAnalysis(BaseModel):
    current: Dict[str, Any]
    influence: str
    ten_god: str
    key_events: List[str]
    interpretation: str


class BaziReading(BaseModel):
    chart: BaziChart
    elements: ElementAnalysis
    personality: str
    fortune: BaziFortune
    advice: List[str]
    question_analysis: Optional[QuestionAnalysis] = None
    ten_gods: Optional[TenGodsAnalysis] = None
    spirits: Optional[SpiritsAnalysis] = None
    use_god: Optional[UseGodAnalysis] = None
    dayun: Optional[DayunAnalysis] = None
    liunian: Optional[LiunianAnalysis] = None
    detailed_interpretation: str = ""


def _pillar(stem_index: int, branch_index: int) -> Pillar:
    stem = heavenly_stems[stem_index % 10]
    branch = earthly_branches[branch_index % 12]
    return Pillar(stem=stem, branch=branch, name=f"{stem['name']}{branch['name']}")


def calculate_year_pillar(year: int) -> Pillar:
    offset = year - BASE_YEAR
    return _pillar(offset % 10, offset % 12)


def calculate_month_pillar(year: int, month: int) -> Pillar:
    year_stem = (year - BASE_YEAR) % 10
    return _pillar((year_stem % 5) * 2 + month - 1, month + 1)


def calculate_day_pillar(birth_date: date) -> Pillar:
    days = (birth_date - BASE_DAY).days
    return _pillar(days + BASE_DAY_STEM, days + BASE_DAY_BRANCH)


def calculate_hour_pillar(day_stem_index: int, hour: int) -> Pillar:
    branch_index = ((hour + 1) // 2) % 12
    return _pillar((day_stem_index % 5) * 2 + branch_index, branch_index)


def calculate_bazi_chart(birth_date: date, hour: Optional[int] = None) -> BaziChart:
    if isinstance(birth_date, datetime):
        birth_date = birth_date.date()
    if hour is None:
        hour = DEFAULT_HOUR

    day = calculate_day_pillar(birth_date)
    return BaziChart(
        year=calculate_year_pillar(birth_date.year),
        month=calculate_month_pillar(birth_date.year, birth_date.month),
        day=day,
        hour=calculate_hour_pillar(day.stem["id"], hour),
    )


def element_distribution(chart: BaziChart) -> Dict[str, int]:
    distribution = {element: 0 for element in FIVE_ELEMENTS}
    for pillar in chart.pillars:
        distribution[pillar.stem["element"]] += 1
        distribution[pillar.branch["element"]] += 1
    return distribution


def dominant_element(distribution: Dict[str, int]) -> str:
    dominant, max_count = "木", 0
    for element, count in distribution.items():
        if count > max_count:
            dominant, max_count = element, count
    return dominant


def balance_label(distribution: Dict[str, int]) -> str:
    counts = list(distribution.values())
    avg = sum(counts) / len(counts)
    variance = sum((count - avg) ** 2 for count in counts) / len(counts)
    if variance < 1:
        return "五行分布均衡，命局平和稳定。"
    if variance < 2:
        return "五行分布较为均衡，略有偏重。"
    return "五行分布不均，有明显的强弱之分。"


def analyze_elements(chart: BaziChart, with_balance: bool = False) -> ElementAnalysis:
    distribution = element_distribution(chart)
    return ElementAnalysis(
        distribution=distribution,
        dominant=dominant_element(distribution),
        lacking=[element for element, count in distribution.items() if count == 0],
        balance=balance_label(distribution) if with_balance else None,
    )


def _polarity(stem: Dict[str, Any]) -> str:
    return "阳性" if stem["yin_yang"] == "阳" else "阴性"


def generate_personality(chart: BaziChart, elements: ElementAnalysis) -> str:
    day_stem = chart.day.stem
    chars = element_characteristics[elements.dominant]

    personality = (
        f"您的日主是{day_stem['name']}{day_stem['element']}，{_polarity(day_stem)}特质明显。"
        f"命局中{elements.dominant}最旺，{chars['description']}\n\n"
        f"性格特点：您具有{'、'.join(chars['positive'][:3])}的特质。"
        f"同时需要注意避免{chars['negative'][0]}的倾向。"
    )
    if elements.lacking:
        personality += f"\n\n命局缺{'、'.join(elements.lacking)}，建议在生活中多接触相关元素以达到平衡。"
    return personality


def generate_fortune(chart: BaziChart, elements: ElementAnalysis) -> BaziFortune:
    dominant = elements.dominant
    day_element = chart.day.stem["element"]

    if dominant in ("木", "火"):
        career = (
            f"您的命局适合从事创造性和领导性的工作。{day_element}日主的人在需要创新思维的领域会有出色表现。"
            "建议从事文化、教育、艺术或管理类工作。"
        )
    elif dominant in ("土", "金"):
        career = (
            f"您的命局适合从事稳定和技术性的工作。{day_element}日主的人在需要专业技能的领域会有优势。"
            "建议从事金融、工程、医疗或技术类工作。"
        )
    else:
        career = (
            f"您的命局适合从事灵活和智慧型的工作。{day_element}日主的人在需要应变能力的领域会表现突出。"
            "建议从事贸易、咨询、传媒或服务类工作。"
        )

    if elements.distribution["金"] > 0 or elements.distribution["土"] > 0:
        wealth = (
            "命局中财星有力，具有良好的财运基础。通过努力工作和明智投资，可以积累可观的财富。"
            "建议注重长期规划，避免投机冒险。"
        )
    else:
        wealth = (
            "命局中财星较弱，需要通过自身努力创造财富。建议发展专业技能，通过提升能力来增加收入。"
            "保持勤俭节约的习惯，稳步积累财富。"
        )

    if elements.lacking:
        health = (
            f"命局五行不够平衡，需要注意相关的健康问题。缺{elements.lacking[0]}的人，应该注意对应器官的保养。"
            "建议保持规律作息，适度运动，注意饮食平衡。"
        )
    else:
        health = (
            "命局五行较为平衡，整体健康状况良好。保持积极的生活态度和良好的生活习惯，可以维持健康状态。"
            "定期体检，预防为主。"
        )

    relationships = f"您的生肖是{chart.year.branch['zodiac']}，在感情方面"
    if dominant in ("水", "木"):
        relationships += "较为感性和浪漫。重视情感交流，容易与人建立深厚的感情。建议在感情中保持理性，避免过度依赖。"
    else:
        relationships += "较为理性和稳重。重视感情的稳定性和长久性。建议在感情中多表达情感，增加浪漫元素。"

    return BaziFortune(career=career, wealth=wealth, health=health, relationships=relationships)


def generate_advice(chart: BaziChart, elements: ElementAnalysis) -> List[str]:
    day_stem = chart.day.stem
    advice = [f"您的命局以{elements.dominant}为主，建议多接触{generates[elements.dominant]}元素以增强运势"]
    for element in elements.lacking:
        advice.append(f"命局缺{element}，可以通过穿戴相关颜色、方位调整等方式补充")
    attitude = "积极进取" if day_stem["yin_yang"] == "阳" else "内敛沉稳"
    advice.append(f"作为{day_stem['name']}{day_stem['element']}日主，保持{attitude}的态度会更有利")
    advice.append("保持五行平衡，在生活中注意调和各方面的关系")
    advice.append("顺应自然规律，在合适的时机做合适的事情")
    return advice


def generate_basic_reading(birth_date: date, hour: Optional[int] = None) -> BaziReading:
    chart = calculate_bazi_chart(birth_date, hour)
    elements = analyze_elements(chart)
    return BaziReading(
        chart=chart,
        elements=elements,
        personality=generate_personality(chart, elements),
        fortune=generate_fortune(chart, elements),
        advice=generate_advice(chart, elements),
    )


def calculate_ten_god(day_master: Dict[str, Any], other: Dict[str, Any]) -> str:
    """Classify another stem against the day master by element relation and polarity."""
    if day_master["name"] == other["name"]:
        return "比肩"

    same_polarity = day_master["yin_yang"] == other["yin_yang"]
    mine, theirs = day_master["element"], other["element"]

    if mine == theirs:
        return "比肩" if same_polarity else "劫财"
    if generates[mine] == theirs:
        return "食神" if same_polarity else "伤官"
    if controls[mine] == theirs:
        return "偏财" if same_polarity else "正财"
    if controls[theirs] == mine:
        return "七杀" if same_polarity else "正官"
    if generates[theirs] == mine:
        return "偏印" if same_polarity else "正印"
    return "比肩"


def ten_god_meaning(god: str) -> str:
    return TEN_GOD_MEANINGS.get(god, "影响命运发展。")


def analyze_ten_gods(chart: BaziChart) -> TenGodsAnalysis:
    day_master = chart.day.stem
    gods = []
    counts: Dict[str, int] = {}

    for label, stem in (("年干", chart.year.stem), ("月干", chart.month.stem), ("时干", chart.hour.stem)):
        god = calculate_ten_god(day_master, stem)
        counts[god] = counts.get(god, 0) + 1
        gods.append(
            TenGod(
                name=f"{label}{god}",
                element=stem["element"],
                meaning=ten_god_meaning(god),
                influence=PILLAR_INFLUENCES.get(label[0], "影响整体运势。"),
            )
        )

    dominant, max_count = "比肩", 0
    for god, count in counts.items():
        if count > max_count:
            dominant, max_count = god, count

    return TenGodsAnalysis(
        day_master=f"{day_master['name']}{day_master['element']}",
        gods=gods,
        dominant=dominant,
        interpretation=(
            f"日主{day_master['name']}{day_master['element']}，{day_master['yin_yang']}性。"
            f"命局中{dominant}较为突出，{ten_god_meaning(dominant)}"
        ),
    )


def analyze_spirits(chart: BaziChart) -> SpiritsAnalysis:
    auspicious = []
    branches = [pillar.branch["name"] for pillar in chart.pillars]

    if chart.day.branch["name"] in NOBLE_DAY_BRANCHES:
        auspicious.append("天乙贵人")
    if chart.day.stem["name"] in SCHOLAR_DAY_STEMS:
        auspicious.append("文昌星")
    if any(branch in PEACH_BLOSSOM_BRANCHES for branch in branches):
        auspicious.append("桃花")
    if any(branch in CANOPY_BRANCHES for branch in branches):
        auspicious.append("华盖")

    if auspicious:
        interpretation = f"命局中有{'、'.join(auspicious)}等吉神，为命主带来助力。"
    else:
        interpretation = "命局平和，需要自身努力开创运势。"
    return SpiritsAnalysis(auspicious=auspicious, inauspicious=[], interpretation=interpretation)


def analyze_use_god(chart: BaziChart) -> UseGodAnalysis:
    strongest = dominant_element(element_distribution(chart))
    use_god = controls[strongest]
    return UseGodAnalysis(
        use_god=use_god,
        avoid_god=strongest,
        recommendation=(
            f"命局{strongest}过旺，宜用{use_god}来平衡。"
            f"建议多接触{use_god}相关的事物，如颜色、方位、职业等。"
            f"避免过多接触{strongest}，以免加重失衡。"
        ),
    )


def analyze_dayun(chart: BaziChart, birth_date: date, gender: str = "male", current_year: Optional[int] = None) -> DayunAnalysis:
    """
    Current ten-year luck period. Yang-year men and yin-year women step forward from
    the month pillar, everyone else steps backward.
    """
    current_year = current_year or date.today().year
    age = current_year - birth_date.year
    period, years_in = age // 10, age % 10

    is_yang_year = chart.year.stem["id"] % 2 == 0
    forward = (gender == "male") == is_yang_year
    step = period if forward else -period

    stem = heavenly_stems[(chart.month.stem["id"] + step) % 10]
    branch = earthly_branches[(chart.month.branch["id"] + step) % 12]
    age_range = f"{period * 10}-{(period + 1) * 10 - 1}岁"

    ten_god = calculate_ten_god(chart.day.stem, stem)
    use_god = analyze_use_god(chart).use_god
    dayun_element = stem["element"]
    favorable = dayun_element == use_god or generates[dayun_element] == use_god

    pair = f"{stem['name']}{branch['name']}"
    influence = f"当前大运{pair}（{age_range}），"
    if favorable:
        influence += (
            f"大运有利，{ten_god}当值。这是发展事业、提升地位的好时机。"
            f"大运天干{stem['name']}{dayun_element}，与命局相生相助，适合在这个阶段积极进取，开拓新的领域。"
        )
    else:
        influence += (
            f"大运需谨慎，{ten_god}当值。宜守不宜攻，稳中求进。"
            f"大运天干{stem['name']}{dayun_element}，需要注意调整策略，保持稳定，积累实力，等待更好的时机。"
        )

    interpretation = (
        "【大运详解】\n"
        f"您目前正处于{pair}大运（{age_range}），已行运{years_in}年。\n"
        f"大运{ten_god}，{ten_god_meaning(ten_god)}\n"
    )
    if favorable:
        interpretation += "此大运对您有利，是人生的上升期。建议：\n1. 把握机遇，积极进取\n2. 扩展人脉，寻求合作\n3. 投资发展，提升自我\n"
    else:
        interpretation += "此大运需要谨慎应对，是人生的调整期。建议：\n1. 稳扎稳打，避免冒进\n2. 修炼内功，提升能力\n3. 保守理财，积累资源\n"

    return DayunAnalysis(
        current={"gan": stem["name"], "zhi": branch["name"], "age": age_range},
        influence=influence,
        favorable=favorable,
        ten_god=ten_god,
        interpretation=interpretation,
    )


def analyze_liunian(chart: BaziChart, current_year: Optional[int] = None) -> LiunianAnalysis:
    current_year = current_year or date.today().year
    year_pillar = calculate_year_pillar(current_year)
    stem, branch = year_pillar.stem, year_pillar.branch
    ten_god = calculate_ten_god(chart.day.stem, stem)

    text, events = LIUNIAN_EVENTS.get(ten_god, ("需要根据具体情况调整策略。", ("保持稳定", "谨慎决策", "积累经验", "顺势而为")))
    influence = f"{current_year}年流年{year_pillar.name}，{ten_god}当值。{text}"

    tips = DEFAULT_LIUNIAN_ADVICE
    for gods, candidate in LIUNIAN_ADVICE:
        if ten_god in gods:
            tips = candidate
            break

    interpretation = (
        "【流年详解】\n"
        f"{current_year}年为{year_pillar.name}年，流年{ten_god}。\n"
        f"{ten_god_meaning(ten_god)}\n\n"
        "【流年重点】\n"
        + "".join(f"{i}. {event}\n" for i, event in enumerate(events, 1))
        + "\n【流年建议】\n"
        + f"根据流年{ten_god}的特点，建议您在今年：\n"
        + "".join(f"- {tip}\n" for tip in tips)
    )

    return LiunianAnalysis(
        current={"gan": stem["name"], "zhi": branch["name"], "year": current_year},
        influence=influence,
        ten_god=ten_god,
        key_events=list(events),
        interpretation=interpretation,
    )


def generate_enhanced_personality(elements: ElementAnalysis, ten_gods: TenGodsAnalysis) -> str:
    personality = (
        f"【日主分析】\n{ten_gods.interpretation}\n\n"
        f"【五行特质】\n命局{elements.dominant}最旺，{element_characteristics[elements.dominant]['description']}\n\n"
        f"【十神性格】\n{ten_gods.dominant}为主导十神，{ten_god_meaning(ten_gods.dominant)}"
    )
    if elements.lacking:
        personality += f"\n\n【五行调和】\n命局缺{'、'.join(elements.lacking)}，建议通过后天调理来平衡五行。"
    return personality


def generate_enhanced_fortune(
    chart: BaziChart,
    analysis: Optional[QuestionAnalysis],
    ten_gods: TenGodsAnalysis,
    use_god: UseGodAnalysis,
    dayun: DayunAnalysis,
    liunian: LiunianAnalysis,
) -> BaziFortune:
    dominant = ten_gods.dominant
    category = analysis.category if analysis else None
    wealth_year = liunian.ten_god in ("正财", "偏财")

    if category == "career":
        career = f"关于您的事业问题，{dominant}主导的命局"
        if dominant in ("正官", "七杀", "正印"):
            career += "适合从事管理、公职或专业技术工作。您有责任心和领导能力，能够承担重要职责。"
        elif dominant in ("食神", "伤官"):
            career += "适合从事创意、艺术或自由职业。您有才华和创新能力，适合发挥个人特长。"
        else:
            career += "适合从事商业、贸易或合作性工作。您善于把握机会，能够创造财富。"
        career += f"\n\n【时运分析】\n{dayun.influence}\n{liunian.influence}\n"
        if dayun.favorable and liunian.ten_god in ("正官", "七杀", "正财", "偏财"):
            career += "当前大运和流年都对事业发展有利，是升职加薪的好时机！"
    else:
        influence_parts = liunian.influence.split("。")
        career = (
            f"事业方面，{dominant}的特质让您在工作中有独特优势。{use_god.recommendation.split('。')[0]}。\n"
            f"当前{'大运有利' if dayun.favorable else '大运需谨慎'}，{liunian.ten_god}流年，"
            f"{influence_parts[1] if len(influence_parts) > 1 else ''}"
        )

    if category == "wealth":
        wealth = "关于您的财运问题，"
        if dominant in ("正财", "偏财"):
            wealth += "命局财星得力，财运基础良好。正财主稳定收入，偏财主意外之财。建议把握机会，稳健投资。"
        else:
            wealth += f"需要通过发挥自身优势来创造财富。{use_god.use_god}为用神，从事相关行业会有利于财运。"
        wealth += "\n\n【流年财运】\n"
        if wealth_year:
            wealth += f"今年流年{liunian.ten_god}，财运亨通，是投资理财的好时机。"
        else:
            wealth += f"今年流年{liunian.ten_god}，财运平稳，建议稳健理财，避免冒险投资。"
    else:
        wealth = "财运方面，建议顺应命局特点，通过正当途径积累财富。"
        if wealth_year:
            wealth += f"今年流年{liunian.ten_god}，财运较好，可适当投资。"

    health = f"健康方面，注意{chart.day.stem['element']}对应的器官保养。保持五行平衡，规律作息，适度运动。"
    if not dayun.favorable:
        health += "当前大运需要特别注意身体健康，避免过度劳累。"

    relationships = f"感情方面，生肖{chart.year.branch['zodiac']}的您，"
    if dominant in ("正官", "正财", "正印"):
        relationships += "重视感情的稳定和长久。建议真诚相待，用心经营感情。"
    else:
        relationships += "感情丰富多彩。建议保持理性，珍惜缘分。"
    if liunian.current["zhi"] in PEACH_BLOSSOM_BRANCHES:
        relationships += "\n今年流年桃花，异性缘旺，单身者有望遇到良缘。"

    return BaziFortune(career=career, wealth=wealth, health=health, relationships=relationships)


def generate_enhanced_advice(
    analysis: Optional[QuestionAnalysis],
    ten_gods: TenGodsAnalysis,
    use_god: UseGodAnalysis,
    elements: ElementAnalysis,
    dayun: DayunAnalysis,
    liunian: LiunianAnalysis,
) -> List[str]:
    age = dayun.current["age"]
    advice = [
        f"当前大运有利（{age}），把握机遇，积极进取"
        if dayun.favorable
        else f"当前大运需谨慎（{age}），稳扎稳打，修炼内功",
        f"今年流年{liunian.ten_god}，{liunian.key_events[0]}",
        f"用神为{use_god.use_god}，建议多接触相关元素以增强运势",
        f"发挥{ten_gods.dominant}的优势，{ten_god_meaning(ten_gods.dominant).split('。')[0]}",
    ]
    if elements.lacking:
        advice.append(f"补充{elements.lacking[0]}元素，可通过颜色、方位、饮食等方式调理")
    if analysis and analysis.category == "career":
        advice.append("事业发展要顺应命局特点，选择适合的行业和方向")
    elif analysis and analysis.category == "wealth":
        advice.append("财富积累需要时间，保持耐心和理性投资")
    advice.append("保持五行平衡，顺应自然规律")
    advice.append("修身养性，提升自我，命运掌握在自己手中")
    return advice


def _chart_line(label: str, pillar: Pillar) -> str:
    return (
        f"{label}：{pillar.name}（{pillar.stem['name']}{pillar.stem['element']} "
        f"{pillar.branch['name']}{pillar.branch['element']}）\n"
    )


def generate_detailed_interpretation(
    chart: BaziChart,
    analysis: Optional[QuestionAnalysis],
    ten_gods: TenGodsAnalysis,
    spirits: SpiritsAnalysis,
    use_god: UseGodAnalysis,
    dayun: DayunAnalysis,
    liunian: LiunianAnalysis,
    elements: ElementAnalysis,
    question: Optional[str] = None,
) -> str:
    if question and analysis:
        text = contextual_opening(question, analysis)
    else:
        text = "为您进行八字命理分析。\n\n"

    text += "【八字命盘】\n"
    for label, pillar in zip(("年柱", "月柱", "日柱", "时柱"), chart.pillars):
        text += _chart_line(label, pillar)

    text += f"\n【十神分析】\n{ten_gods.interpretation}\n"
    text += "".join(f"{god.name}：{god.meaning}\n" for god in ten_gods.gods)

    text += f"\n【神煞吉凶】\n{spirits.interpretation}\n"
    if spirits.auspicious:
        text += f"吉神：{'、'.join(spirits.auspicious)}\n"

    text += f"\n【用神喜忌】\n{use_god.recommendation}\n\n"
    text += f"【大运分析】\n{dayun.interpretation}\n"
    text += f"【流年分析】\n{liunian.interpretation}\n"

    text += "【五行分布】\n"
    text += "".join(f"{element}：{count}个 " for element, count in elements.distribution.items())
    text += f"\n{elements.balance}\n\n"
    return text


def generate_enhanced_reading(
    birth_date: date,
    hour: Optional[int] = None,
    gender: Optional[str] = None,
    question: Optional[str] = None,
    current_year: Optional[int] = None,
) -> BaziReading:
    """
    Four-pillar reading with ten gods, spirits, the useful element, the current luck
    decade and the current year. Gender only affects the luck decade direction.
    """
    if isinstance(birth_date, datetime):
        birth_date = birth_date.date()

    chart = calculate_bazi_chart(birth_date, hour)
    analysis = analyze_question(question) if question else None
    ten_gods = analyze_ten_gods(chart)
    spirits = analyze_spirits(chart)
    use_god = analyze_use_god(chart)
    dayun = analyze_dayun(chart, birth_date, gender or "male", current_year)
    liunian = analyze_liunian(chart, current_year)
    elements = analyze_elements(chart, with_balance=True)
    logger.debug(
        f"Bazi chart {chart.year.name} {chart.month.name} {chart.day.name} {chart.hour.name}, "
        f"dominant={elements.dominant}, dayun favorable={dayun.favorable}"
    )

    return BaziReading(
        chart=chart,
        question_analysis=analysis,
        ten_gods=ten_gods,
        spirits=spirits,
        use_god=use_god,
        dayun=dayun,
        liunian=liunian,
        elements=elements,
        personality=generate_enhanced_personality(elements, ten_gods),
        fortune=generate_enhanced_fortune(chart, analysis, ten_gods, use_god, dayun, liunian),
        advice=generate_enhanced_advice(analysis, ten_gods, use_god, elements, dayun, liunian),
        detailed_interpretation=generate_detailed_interpretation(
            chart, analysis, ten_gods, spirits, use_god, dayun, liunian, elements, question
        ),
    )
