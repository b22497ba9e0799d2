# app/services/divination/astrology_services.py
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from app.data.zodiac import zodiac_signs
from app.services.divination.question_analyzer import (
    QuestionAnalysis,
    analyze_question,
    contextual_opening,
)
from app.services.divination.seeded_random import day_of_year, day_random, pick

logger = logging.getLogger(__name__)

LUCKY_COLORS = ["红色", "蓝色", "绿色", "黄色", "紫色", "橙色", "粉色", "白色"]
LUCKY_DIRECTIONS = ["东方", "南方", "西方", "北方", "东南", "西南", "东北", "西北"]

ELEMENT_COLORS = {
    "火": ["红色", "橙色", "金色"],
    "土": ["棕色", "绿色", "黄色"],
    "风": ["白色", "浅蓝", "银色"],
    "水": ["蓝色", "紫色", "海绿"],
}
ELEMENT_DIRECTIONS = {"火": "南方", "土": "中央", "风": "东方", "水": "北方"}
ELEMENT_HEALTH_TIPS = {
    "火": "适度运动，避免过度消耗",
    "土": "保持规律作息，注意饮食",
    "风": "多做深呼吸，放松神经",
}

WEEKDAY_NAMES = ["周日", "周一", "周二", "周三", "周四", "周五", "周六"]

HOUSES = [
    (1, "命宫", "自我、外貌、个性"),
    (2, "财帛宫", "金钱、价值观、物质"),
    (3, "兄弟宫", "沟通、学习、兄弟姐妹"),
    (4, "田宅宫", "家庭、根基、内心安全"),
    (5, "子女宫", "创造、恋爱、娱乐"),
    (6, "奴仆宫", "工作、健康、日常"),
    (7, "夫妻宫", "婚姻、合作、人际"),
    (8, "疾厄宫", "转变、深度、共享资源"),
    (9, "迁移宫", "哲学、旅行、高等教育"),
    (10, "官禄宫", "事业、地位、公众形象"),
    (11, "福德宫", "朋友、愿望、社群"),
    (12, "相貌宫", "潜意识、灵性、隐秘"),
]
CATEGORY_HOUSES = {"love": 5, "career": 10, "wealth": 2, "health": 6, "family": 4, "study": 3}

REFERENCE_NEW_MOON = date(2024, 1, 11)
LUNAR_CYCLE_DAYS = 29.53

MOON_PHASES = [
    ("新月", "新月代表新的开始和种子的播种。这是设定意图、开启新计划的最佳时机。", "制定新目标，开始新项目，播下希望的种子。"),
    ("娥眉月", "娥眉月象征成长和建立。你的计划开始显现雏形，保持耐心和努力。", "采取行动，克服初期障碍，坚持你的目标。"),
    ("上弦月", "上弦月带来挑战和决策的时刻。这是检验你决心的时候。", "做出关键决定，调整策略，克服阻力。"),
    ("盈凸月", "盈凸月象征完善和精进。你的努力即将开花结果。", "完善细节，做最后的准备，保持专注。"),
    ("满月", "满月代表圆满和显化。这是收获成果、庆祝成就的时刻。", "享受成果，表达感恩，释放不再需要的东西。"),
    ("亏凸月", "亏凸月象征分享和传播。将你的收获与他人分享。", "分享经验，帮助他人，传播智慧。"),
    ("下弦月", "下弦月带来反思和释放。这是放下过去、清理空间的时候。", "反思总结，释放负担，为新周期做准备。"),
    ("残月", "残月象征休息和内省。这是充电和准备新开始的时期。", "休息放松，冥想内省，信任生命的循环。"),
]


class Fortune(BaseModel):
    overall: str
    love: str
    career: str
    health: str
    finance: str


class LuckyElements(BaseModel):
    color: str
    number: int
    direction: str
    time: Optional[str] = None


class PlanetaryInfluences(BaseModel):
    sun: str
    moon: str
    mercury: str
    venus: str
    mars: str
    dominant: str
    dominant_influence: str
    interpretation: str


class HouseAnalysis(BaseModel):
    relevant_house: int
    house_name: str
    house_theme: str
    influence: str


class MoonPhase(BaseModel):
    phase: str
    percentage: int
    influence: str
    recommendation: str


class AstrologyReading(BaseModel):
    sign: Dict[str, Any]
    fortune: Fortune
    lucky_elements: LuckyElements
    advice: List[str]
    question_analysis: Optional[QuestionAnalysis] = None
    planetary_influences: Optional[PlanetaryInfluences] = None
    house_analysis: Optional[HouseAnalysis] = None
    moon_phase: Optional[MoonPhase] = None
    detailed_interpretation: str = ""


def resolve_zodiac_sign(month: int, day: int) -> Dict[str, Any]:
    """
    Return the first sign whose date range contains month/day. Ranges that wrap the
    year end (Capricorn) are matched on either side of the boundary.
    """
    for sign in zodiac_signs:
        (start_month, start_day), (end_month, end_day) = sign["date_range"]["start"], sign["date_range"]["end"]
        on_start = month == start_month and day >= start_day
        on_end = month == end_month and day <= end_day

        if start_month > end_month:
            inside = month > start_month or month < end_month
        else:
            inside = start_month < month < end_month

        if on_start or on_end or inside:
            return sign

    return zodiac_signs[0]


def calculate_zodiac_sign(birth_date: date) -> Dict[str, Any]:
    return resolve_zodiac_sign(birth_date.month, birth_date.day)


def generate_fortune(sign: Dict[str, Any], today: date) -> Fortune:
    doy = day_of_year(today)
    positive = sign["traits"]["positive"]
    negative = sign["traits"]["negative"]
    name, element = sign["name"], sign["element"]

    overall_templates = [
        f"今天对{name}来说是充满{positive[0]}的一天。{element}象星座的特质将帮助你把握机会，展现出色的{positive[1]}。保持积极的态度，你会发现许多意想不到的惊喜。",
        f"{name}的朋友们，今天的能量特别适合发挥你们的{positive[2]}。作为{element}象星座，你们天生具有的{positive[0]}将成为今天的优势。记得保持平衡，避免过度{negative[0]}。",
        f"今天{sign['ruling_planet']}的影响为{name}带来积极的能量。你的{positive[1]}和{positive[3]}将帮助你应对各种挑战。这是展现你真实自我的好时机。",
    ]
    love_templates = [
        f"在感情方面，{name}今天的魅力指数爆表。单身者可能会遇到有趣的人，不妨主动一些。有伴侣的人，今天是增进感情的好日子，可以尝试一些浪漫的活动。",
        f"爱情运势平稳上升。{name}的{positive[0]}会吸引他人的注意。建议多表达你的感受，真诚的沟通会让关系更加稳固。避免因{negative[1]}而产生误会。",
        f"今天的爱情能量对{name}非常有利。你的{positive[2]}会让你在感情中更加自信。对于正在寻找爱情的人，保持开放的心态，缘分可能就在不经意间出现。",
    ]
    career_templates = [
        f"事业方面，{name}今天适合展现领导才能。你的{positive[4]}会得到认可，可能会有新的机会出现。保持专注，避免被琐事分散注意力。",
        f"工作运势良好。{element}象星座的特质让你在团队中表现出色。今天适合处理重要项目或进行创新尝试。记得与同事保持良好沟通，合作会带来更好的结果。",
        f"{name}今天在职场上充满活力。你的{positive[1]}和{positive[3]}会帮助你解决难题。这是提出新想法或寻求晋升的好时机。",
    ]
    health_templates = [
        f"健康方面需要注意平衡。{name}今天可能会感到精力充沛，但也要注意休息。建议进行适度的运动，保持良好的作息习惯。",
        f"身体状况整体良好。作为{element}象星座，你需要特别关注相关的健康问题。今天适合尝试新的健康习惯，如冥想或瑜伽。",
        f"{name}今天的健康运势稳定。保持积极的心态对身体有益。建议多喝水，保持均衡饮食，避免过度劳累。",
    ]
    finance_templates = [
        f"财运方面，{name}今天有不错的机会。可能会有意外的收入或投资机会。但要谨慎决策，避免冲动消费。",
        f"金钱运势平稳。今天适合进行财务规划或整理账目。{name}的{positive[3]}会帮助你做出明智的财务决定。",
        f"财运呈上升趋势。{name}今天可能会发现新的赚钱机会。保持理性，结合你的{positive[1]}来评估风险。",
    ]

    return Fortune(
        overall=pick(overall_templates, day_random(doy, 1)),
        love=pick(love_templates, day_random(doy, 2)),
        career=pick(career_templates, day_random(doy, 3)),
        health=pick(health_templates, day_random(doy, 4)),
        finance=pick(finance_templates, day_random(doy, 5)),
    )


def generate_lucky_elements(today: date) -> LuckyElements:
    doy = day_of_year(today)
    return LuckyElements(
        color=pick(LUCKY_COLORS, day_random(doy, 10)),
        number=int(day_random(doy, 11) * 9) + 1,
        direction=pick(LUCKY_DIRECTIONS, day_random(doy, 12)),
    )


def generate_basic_advice(sign: Dict[str, Any]) -> List[str]:
    positive = sign["traits"]["positive"]
    best = sign["compatibility"]["best"]
    return [
        f"发挥你的{positive[0]}，这是{sign['name']}的天赋",
        f"注意避免过度{sign['traits']['negative'][0]}，保持平衡很重要",
        f"与{best[0]}或{best[1]}的人互动会带来好运",
        f"今天适合进行与{sign['element']}元素相关的活动",
        f"相信你的直觉，{sign['ruling_planet']}会为你指引方向",
    ]


def generate_basic_reading(birth_date: date, today: Optional[date] = None) -> AstrologyReading:
    today = today or date.today()
    sign = calculate_zodiac_sign(birth_date)
    return AstrologyReading(
        sign=sign,
        fortune=generate_fortune(sign, today),
        lucky_elements=generate_lucky_elements(today),
        advice=generate_basic_advice(sign),
    )


def analyze_planetary_influences(
    sign: Dict[str, Any], today: date, analysis: Optional[QuestionAnalysis] = None
) -> PlanetaryInfluences:
    # Orbital periods in days stand in for real ephemeris positions.
    doy = day_of_year(today)
    sun_position = (doy % 30) / 30
    moon_position = (doy % 28) / 28
    mercury_position = (doy % 88) / 88
    venus_position = (doy % 225) / 225
    mars_position = (doy % 687) / 687
    name = sign["name"]

    if sun_position > 0.5:
        sun = f"太阳能量强劲，{name}的自信和创造力处于高峰期。这是展现自我、追求目标的绝佳时机。"
    else:
        sun = f"太阳能量温和，{name}适合内省和规划。保持耐心，积蓄力量等待时机。"

    if moon_position > 0.7:
        moon = f"月亮能量充盈，{name}的直觉和情感敏锐度提升。相信你的第六感，它会为你指引方向。"
    elif moon_position > 0.3:
        moon = f"月亮能量平衡，{name}的情绪稳定。这是处理人际关系和情感事务的好时机。"
    else:
        moon = f"月亮能量较弱，{name}需要多关注内心需求。给自己一些独处和休息的时间。"

    if mercury_position > 0.6:
        mercury = f"水星活跃，{name}的思维敏捷，沟通顺畅。适合学习、写作、谈判等需要脑力的活动。"
    else:
        mercury = f"水星能量平稳，{name}适合深度思考。避免仓促决策，多花时间理清思路。"

    if venus_position > 0.5:
        venus = f"金星祝福，{name}的魅力值爆表。感情运势上升，艺术灵感丰富。享受美好的人际互动吧。"
    else:
        venus = f"金星能量温和，{name}适合培养内在美。专注于自我提升，魅力会自然散发。"

    if mars_position > 0.6:
        mars = f"火星激发，{name}充满行动力和勇气。这是采取主动、突破障碍的好时机。"
    else:
        mars = f"火星能量稳定，{name}适合稳扎稳打。制定计划，循序渐进地推进目标。"

    ruler = sign["ruling_planet"]
    inner_planets = {"太阳": sun, "月亮": moon, "水星": mercury, "金星": venus, "火星": mars}
    dominant_influence = inner_planets.get(
        ruler, f"{ruler}作为{name}的守护星，为你带来深远的影响和转变的力量。"
    )

    interpretation = f"当前行星配置对{name}整体有利。"
    category = analysis.category if analysis else None
    if category == "love":
        interpretation += "金星的位置特别值得关注，它直接影响你的感情运势。"
    elif category == "career":
        interpretation += "太阳和火星的能量将助力你的事业发展。"
    elif category == "wealth":
        interpretation += "木星的扩张能量可能为你带来财务机会。"

    return PlanetaryInfluences(
        sun=sun,
        moon=moon,
        mercury=mercury,
        venus=venus,
        mars=mars,
        dominant=ruler,
        dominant_influence=dominant_influence,
        interpretation=interpretation,
    )


def analyze_relevant_house(sign: Dict[str, Any], analysis: Optional[QuestionAnalysis] = None) -> HouseAnalysis:
    house_number = CATEGORY_HOUSES.get(analysis.category, 1) if analysis else 1
    number, house_name, theme = HOUSES[house_number - 1]
    influence = (
        f"第{number}宫（{house_name}）当前受到{sign['ruling_planet']}的影响，"
        f"这个宫位主管{theme}。"
        f"对于{sign['name']}来说，这意味着在{theme}方面会有特别的能量和机遇。"
    )
    return HouseAnalysis(relevant_house=number, house_name=house_name, house_theme=theme, influence=influence)


def analyze_moon_phase(today: date) -> MoonPhase:
    days_since = (today - REFERENCE_NEW_MOON).days
    current = (days_since % LUNAR_CYCLE_DAYS) / LUNAR_CYCLE_DAYS
    index = min(int(current / 0.125), len(MOON_PHASES) - 1)
    phase, influence, recommendation = MOON_PHASES[index]
    return MoonPhase(
        phase=phase,
        percentage=round(current * 100),
        influence=influence,
        recommendation=recommendation,
    )


def generate_enhanced_fortune(
    sign: Dict[str, Any],
    analysis: Optional[QuestionAnalysis],
    planetary: PlanetaryInfluences,
    moon: MoonPhase,
    today: date,
) -> Fortune:
    name = sign["name"]
    positive = sign["traits"]["positive"]
    category = analysis.category if analysis else None
    weekday = WEEKDAY_NAMES[(today.weekday() + 1) % 7]

    overall = f"今天是{weekday}，对{name}来说是充满{positive[0]}能量的一天。"
    overall += planetary.interpretation
    overall += f"当前{moon.phase}的能量{'鼓励你开启新篇章' if '新' in moon.influence else '提醒你关注内在成长'}。"

    if category == "love":
        love = f"关于您的感情问题，{planetary.venus}"
        love += f"{name}的{positive[0]}特质在感情中特别有吸引力。"
        love += f"建议{'表达真实感受，让关系更进一步' if moon.phase == '满月' else '给彼此空间，培养内在连接'}。"
    else:
        love = f"感情方面，{planetary.venus}"
        love += f"{name}今天在人际互动中魅力十足。"
        love += "单身者保持开放心态，有伴者多一些浪漫举动。"

    if category == "career":
        career = f"关于您的事业问题，{planetary.sun}{planetary.mars}"
        career += f"作为{sign['element']}象星座，你在职场上的{positive[1]}会得到认可。"
    else:
        career = f"事业方面，{planetary.sun}"
        career += f"{name}今天适合{'展现领导才能' if positive[4] == '领导力强' else '发挥专业优势'}。"
        career += "保持专注，机会就在眼前。"

    health = f"健康方面，{planetary.moon}"
    health += f"作为{sign['element']}象星座，建议{ELEMENT_HEALTH_TIPS.get(sign['element'], '多喝水，关注情绪健康')}。"
    health += f"{moon.phase}期间特别适合{'休息调养' if '休息' in moon.recommendation else '积极锻炼'}。"

    if category == "wealth":
        if moon.phase == "新月":
            suggestion = "规划新的投资"
        elif moon.phase == "满月":
            suggestion = "收获之前的投入"
        else:
            suggestion = "稳健管理现有资产"
        finance = f"关于您的财运问题，当前行星配置对{name}的财务状况有利。"
        finance += f"{positive[3]}的特质会帮助你做出明智的财务决策。"
        finance += f"建议{suggestion}。"
    else:
        finance = f"财运方面，{name}今天有不错的机会。"
        finance += f"保持{positive[3]}的态度，理性评估风险。"
        finance += "避免冲动消费，长期规划更重要。"

    return Fortune(overall=overall, love=love, career=career, health=health, finance=finance)


def generate_enhanced_lucky_elements(sign: Dict[str, Any], today: date, moon: MoonPhase) -> LuckyElements:
    doy = day_of_year(today)
    colors = ELEMENT_COLORS[sign["element"]]
    if "月" in moon.phase and moon.percentage < 50:
        lucky_time = "上午时段（6:00-12:00）"
    else:
        lucky_time = "下午时段（14:00-18:00）"
    return LuckyElements(
        color=colors[doy % len(colors)],
        number=(sign["id"] + doy) % 9 + 1,
        direction=ELEMENT_DIRECTIONS[sign["element"]],
        time=lucky_time,
    )


def generate_enhanced_advice(
    sign: Dict[str, Any],
    analysis: Optional[QuestionAnalysis],
    planetary: PlanetaryInfluences,
    house: HouseAnalysis,
) -> List[str]:
    name = sign["name"]
    positive = sign["traits"]["positive"]
    advice = []

    if analysis:
        if analysis.category == "love":
            advice.append(f"在感情中发挥{name}的{positive[0]}特质")
            advice.append("金星的能量支持你表达真实感受")
        elif analysis.category == "career":
            advice.append(f"在职场上展现{name}的{positive[4]}")
            advice.append("太阳和火星的能量助力你的事业发展")
        elif analysis.category == "wealth":
            advice.append(f"运用{name}的{positive[3]}进行财务规划")
            advice.append("木星的扩张能量可能带来财务机会")

    advice.append(f"{planetary.dominant}作为守护星，为你带来特别的指引")
    advice.append(f"关注第{house.relevant_house}宫（{house.house_name}）的事务")
    advice.append(f"发挥你的{positive[0]}，避免过度{sign['traits']['negative'][0]}")
    advice.append(f"作为{sign['element']}象星座，保持元素平衡很重要")
    advice.append("相信宇宙的安排，一切都在最好的时机发生")
    return advice


def generate_detailed_interpretation(
    sign: Dict[str, Any],
    analysis: Optional[QuestionAnalysis],
    planetary: PlanetaryInfluences,
    house: HouseAnalysis,
    moon: MoonPhase,
    question: Optional[str] = None,
) -> str:
    if question and analysis:
        text = contextual_opening(question, analysis)
    else:
        text = f"为{sign['name']}进行今日星座运势分析。\n\n"

    text += "【星座特质】\n"
    text += f"{sign['name']}（{sign['name_en']}）是{sign['element']}象{sign['quality']}星座，"
    text += f"守护星为{sign['ruling_planet']}。{sign['description']}\n\n"

    text += "【行星能量分析】\n"
    text += f"{planetary.interpretation}\n\n"
    text += f"太阳：{planetary.sun}\n"
    text += f"月亮：{planetary.moon}\n"
    text += f"水星：{planetary.mercury}\n"
    text += f"金星：{planetary.venus}\n"
    text += f"火星：{planetary.mars}\n\n"

    text += "【宫位指引】\n"
    text += f"{house.influence}\n\n"

    text += "【月相能量】\n"
    text += f"当前月相：{moon.phase}（{moon.percentage}%）\n"
    text += f"{moon.influence}\n"
    text += f"建议：{moon.recommendation}\n\n"
    return text


def generate_enhanced_reading(
    birth_date: date,
    question: Optional[str] = None,
    today: Optional[date] = None,
) -> AstrologyReading:
    """
    Daily horoscope combining the sun sign with simplified planetary cycles, the house
    matching the question category and the current moon phase.
    """
    today = today or date.today()
    if isinstance(today, datetime):
        today = today.date()

    sign = calculate_zodiac_sign(birth_date)
    analysis = analyze_question(question) if question else None
    planetary = analyze_planetary_influences(sign, today, analysis)
    house = analyze_relevant_house(sign, analysis)
    moon = analyze_moon_phase(today)
    logger.debug(f"Astrology reading for {sign['name_en']}: moon={moon.phase}, house={house.relevant_house}")

    return AstrologyReading(
        sign=sign,
        question_analysis=analysis,
        planetary_influences=planetary,
        house_analysis=house,
        moon_phase=moon,
        fortune=generate_enhanced_fortune(sign, analysis, planetary, moon, today),
        lucky_elements=generate_enhanced_lucky_elements(sign, today, moon),
        advice=generate_enhanced_advice(sign, analysis, planetary, house),
        detailed_interpretation=generate_detailed_interpretation(sign, analysis, planetary, house, moon, question),
    )
