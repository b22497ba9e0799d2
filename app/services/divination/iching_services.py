# app/services/divination/iching_services.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from app.data.bazi import controls, generates
from app.data.iching import get_hexagram_by_index, hexagrams, trigrams
from app.services.divination.question_analyzer import (
    QuestionAnalysis,
    analyze_question,
    contextual_opening,
)

logger = logging.getLogger(__name__)

LINE_POSITIONS = [
    (1, "初爻", "事物的开始，基础阶段，需要谨慎起步"),
    (2, "二爻", "内卦中位，代表内在修养，中正之道"),
    (3, "三爻", "内卦之上，处于转折点，需要警惕"),
    (4, "四爻", "外卦之始，接近权位，需要谨慎行事"),
    (5, "五爻", "外卦中位，君位，最尊贵的位置"),
    (6, "上爻", "事物的终点，物极必反，需要知进退"),
]

CENTRAL_LINES = {
    "second": "二爻居内卦中位，代表内在的德行和修养。得中则吉，失中则凶。",
    "fifth": "五爻居外卦中位，为君位，代表权力和地位。五爻得正，则事业亨通。",
}

# (months, season, hexagram qi, influence, recommendation)
SEASONS = [
    ((3, 4, 5), "春季", "震卦当令，万物生发", "春季阳气上升，适合开创新事业，播种希望。", "顺应春生之气，积极进取，但不可过于急躁。"),
    ((6, 7, 8), "夏季", "离卦当令，阳气旺盛", "夏季阳气最盛，事业发展迅速，但需防止过热。", "把握夏长之机，全力发展，但要注意劳逸结合。"),
    ((9, 10, 11), "秋季", "兑卦当令，收获之时", "秋季阴气渐长，适合收获成果，总结经验。", "顺应秋收之势，巩固成果，为冬季储备。"),
    ((12, 1, 2), "冬季", "坎卦当令，阳气潜藏", "冬季阴气最盛，适合休养生息，积蓄力量。", "顺应冬藏之道，修养内功，等待春天到来。"),
]

CATEGORY_ADVICE = {
    "career": "事业发展要顺应天时，把握时机",
    "wealth": "财运需要积累，不可急功近利",
    "love": "感情需要真诚，顺其自然",
}

CASTING_METHODS = ("time", "numbers")


class LineInfo(BaseModel):
    position: int
    name: str
    nature: str
    status: str
    meaning: str
    is_changing: bool


class LineAnalysis(BaseModel):
    lines: List[LineInfo]
    central_lines: Dict[str, str]
    interpretation: str


class RelatedHexagrams(BaseModel):
    mutual: Dict[str, Any]
    opposite: Dict[str, Any]
    reversed: Dict[str, Any]
    interpretation: str


class SeasonalInfluence(BaseModel):
    season: str
    hexagram_qi: str
    influence: str
    recommendation: str


class WuxingAnalysis(BaseModel):
    upper_element: str
    lower_element: str
    relationship: str
    balance: str
    interpretation: str


class IChingReading(BaseModel):
    primary_hexagram: Dict[str, Any]
    changing_lines: List[int]
    transformed_hexagram: Optional[Dict[str, Any]] = None
    interpretation: str
    advice: List[str]
    question_analysis: Optional[QuestionAnalysis] = None
    related_hexagrams: Optional[RelatedHexagrams] = None
    line_analysis: Optional[LineAnalysis] = None
    seasonal_influence: Optional[SeasonalInfluence] = None
    wuxing_analysis: Optional[WuxingAnalysis] = None
    detailed_interpretation: str = ""


def _wrap(value: int, n: int) -> int:
    """Map a remainder of 0 onto n, giving 1..n instead of 0..n-1."""
    remainder = value % n
    return n if remainder == 0 else remainder


def _hexagram_index(upper: int, lower: int) -> int:
    return ((upper - 1) * 8 + (lower - 1)) % len(hexagrams)


def cast_by_time(moment: datetime) -> Tuple[int, List[int]]:
    """Plum-blossom casting from the clock: date sum for the upper trigram, plus hour for the lower."""
    base = moment.year + moment.month + moment.day
    upper = _wrap(base, 8)
    lower = _wrap(base + moment.hour, 8)
    changing = _wrap(base + moment.hour + moment.minute, 6)
    return _hexagram_index(upper, lower), [changing]


def cast_by_numbers(numbers: Sequence[int]) -> Tuple[int, List[int]]:
    if numbers is None or len(numbers) < 3:
        raise ValueError("数字起卦需要至少3个数字")
    upper = _wrap(numbers[0], 8)
    lower = _wrap(numbers[1], 8)
    changing = _wrap(numbers[2], 6)
    return _hexagram_index(upper, lower), [changing]


def cast(method: str, moment: Optional[datetime] = None, numbers: Optional[Sequence[int]] = None) -> Tuple[int, List[int]]:
    if method not in CASTING_METHODS:
        raise ValueError("Invalid casting method")
    if method == "time":
        return cast_by_time(moment or datetime.now())
    return cast_by_numbers(numbers)


def transformed_hexagram(primary_index: int, changing_lines: List[int]) -> Optional[Dict[str, Any]]:
    if not changing_lines:
        return None
    return get_hexagram_by_index(primary_index + changing_lines[0])


def _describe_trigram(prefix: str, name: str, compact: bool = False) -> str:
    trigram = trigrams[name]
    if compact:
        return f"{prefix}{trigram['element']}性{trigram['nature']}，方位在{trigram['direction']}"
    return f"{prefix}为{trigram['element']}，性质{trigram['nature']}，方位在{trigram['direction']}"


def _hexagram_header(hexagram: Dict[str, Any]) -> str:
    return (
        f"【本卦】{hexagram['chinese_name']}卦 ({hexagram['name']})\n\n"
        f"卦象：上{hexagram['trigrams']['upper']}下{hexagram['trigrams']['lower']}\n"
        f"卦辞：{hexagram['judgment']}\n"
        f"象辞：{hexagram['image']}\n\n"
        f"【卦象解读】\n{hexagram['interpretation']['general']}\n\n"
    )


def _guidance(hexagram: Dict[str, Any]) -> str:
    return (
        f"【各方面指引】\n"
        f"事业：{hexagram['interpretation']['career']}\n\n"
        f"感情：{hexagram['interpretation']['relationship']}\n\n"
    )


def generate_basic_interpretation(
    primary: Dict[str, Any],
    changing_lines: List[int],
    transformed: Optional[Dict[str, Any]] = None,
    question: Optional[str] = None,
) -> str:
    text = f"关于您的问题：\"{question}\"\n\n" if question else ""
    text += _hexagram_header(primary)
    text += _guidance(primary)

    if changing_lines:
        text += f"【动爻】\n第{'、'.join(str(line) for line in changing_lines)}爻发动，表示事态正在变化之中。需要特别关注这些方面的发展。\n\n"
        if transformed:
            text += (
                f"【之卦】{transformed['chinese_name']}卦 ({transformed['name']})\n\n"
                f"事态发展的趋势指向{transformed['chinese_name']}卦。{transformed['interpretation']['general']}\n\n"
            )

    text += f"【总体建议】\n{primary['interpretation']['advice']}\n"
    return text


def generate_basic_advice(primary: Dict[str, Any], transformed: Optional[Dict[str, Any]] = None) -> List[str]:
    advice = [
        primary["interpretation"]["advice"],
        _describe_trigram("上卦", primary["trigrams"]["upper"]),
        _describe_trigram("下卦", primary["trigrams"]["lower"]),
    ]
    if transformed:
        advice.append(f"事态将向{transformed['chinese_name']}卦发展，需要提前做好准备")
        advice.append(transformed["interpretation"]["advice"])
    advice.append("周易的智慧在于顺应天时，把握变化的规律")
    advice.append("保持中正之道，不偏不倚，方能趋吉避凶")
    return advice


def generate_basic_reading(
    method: str,
    moment: Optional[datetime] = None,
    numbers: Optional[Sequence[int]] = None,
    question: Optional[str] = None,
) -> IChingReading:
    index, changing_lines = cast(method, moment, numbers)
    primary = get_hexagram_by_index(index)
    transformed = transformed_hexagram(index, changing_lines)
    return IChingReading(
        primary_hexagram=primary,
        changing_lines=changing_lines,
        transformed_hexagram=transformed,
        interpretation=generate_basic_interpretation(primary, changing_lines, transformed, question),
        advice=generate_basic_advice(primary, transformed),
    )


def analyze_related_hexagrams(primary: Dict[str, Any]) -> RelatedHexagrams:
    """
    Mutual, opposite and reversed hexagrams. These are offsets into the table rather than
    line-by-line derivations, which the partial table cannot support.
    """
    position = primary["number"] - 1
    mutual = get_hexagram_by_index(position + 16)
    opposite = get_hexagram_by_index(63 - position)
    reversed_ = get_hexagram_by_index(position + 32)

    interpretation = (
        "【卦象关系分析】\n"
        f"互卦为{mutual['chinese_name']}，揭示事物的内在本质和发展趋势。\n"
        f"{mutual['interpretation']['general']}\n\n"
        f"错卦为{opposite['chinese_name']}，展现事物的对立面和另一种可能。\n"
        f"当前局面的反面是{opposite['chinese_name']}，需要从对立角度思考问题。\n\n"
        f"综卦为{reversed_['chinese_name']}，显示事物的转化和变通之道。\n"
        f"事态可能向{reversed_['chinese_name']}的方向转化，需要灵活应对。\n\n"
    )
    return RelatedHexagrams(mutual=mutual, opposite=opposite, reversed=reversed_, interpretation=interpretation)


def analyze_lines(changing_lines: List[int]) -> LineAnalysis:
    lines = []
    for index, (position, name, meaning) in enumerate(LINE_POSITIONS):
        lines.append(
            LineInfo(
                position=position,
                name=name,
                nature="阳位" if index % 2 == 0 else "阴位",
                status="当位" if index % 2 == 0 else "不当位",
                meaning=meaning,
                is_changing=position in changing_lines,
            )
        )

    interpretation = "【爻位分析】\n"
    if changing_lines:
        interpretation += f"动爻位于第{'、'.join(str(line) for line in changing_lines)}爻，表示这些方面正在发生变化。\n\n"
        for line in changing_lines:
            info = lines[line - 1]
            interpretation += f"{info.name}动：{info.meaning}\n"
        interpretation += "\n"
    interpretation += f"【中正之道】\n{CENTRAL_LINES['second']}\n{CENTRAL_LINES['fifth']}\n"

    return LineAnalysis(lines=lines, central_lines=dict(CENTRAL_LINES), interpretation=interpretation)


def analyze_seasonal_influence(moment: datetime) -> SeasonalInfluence:
    for months, season, qi, influence, recommendation in SEASONS:
        if moment.month in months:
            return SeasonalInfluence(season=season, hexagram_qi=qi, influence=influence, recommendation=recommendation)
    raise ValueError(f"Invalid month: {moment.month}")


def analyze_wuxing(primary: Dict[str, Any]) -> WuxingAnalysis:
    """Five-element relation between the upper and lower trigram."""
    upper_name, lower_name = primary["trigrams"]["upper"], primary["trigrams"]["lower"]
    upper, lower = trigrams[upper_name]["wuxing"], trigrams[lower_name]["wuxing"]

    if upper == lower:
        relationship, balance = "比和", "上下同气，力量集中，但需防止过刚或过柔。"
    elif generates[lower] == upper:
        relationship, balance = "相生", "下生上，内助外，基础稳固，发展顺利。"
    elif generates[upper] == lower:
        relationship, balance = "相生", "上生下，外助内，得到支持，但需注意消耗。"
    elif controls[lower] == upper:
        relationship, balance = "相克", "下克上，内制外，有制约，需要调和。"
    elif controls[upper] == lower:
        relationship, balance = "相克", "上克下，外制内，有压力，需要化解。"
    else:
        relationship, balance = "相和", "上下和谐，各司其职，平衡发展。"

    return WuxingAnalysis(
        upper_element=upper,
        lower_element=lower,
        relationship=relationship,
        balance=balance,
        interpretation=f"上卦{upper_name}属{upper}，下卦{lower_name}属{lower}，两者{relationship}。{balance}",
    )


def generate_detailed_interpretation(
    primary: Dict[str, Any],
    changing_lines: List[int],
    transformed: Optional[Dict[str, Any]],
    related: RelatedHexagrams,
    line_analysis: LineAnalysis,
    seasonal: SeasonalInfluence,
    wuxing: WuxingAnalysis,
    analysis: Optional[QuestionAnalysis],
    question: Optional[str] = None,
) -> str:
    if question and analysis:
        text = contextual_opening(question, analysis)
    else:
        text = "为您进行周易占卜分析。\n\n"

    text += _hexagram_header(primary)
    text += f"【五行分析】\n{wuxing.interpretation}\n\n"
    text += line_analysis.interpretation + "\n"
    text += related.interpretation

    if changing_lines and transformed:
        text += (
            f"【之卦】{transformed['chinese_name']}卦 ({transformed['name']})\n\n"
            f"事态发展的趋势指向{transformed['chinese_name']}卦。\n"
            f"{transformed['interpretation']['general']}\n\n"
        )

    text += (
        f"【时令影响】\n当前{seasonal.season}，{seasonal.hexagram_qi}。\n"
        f"{seasonal.influence}\n{seasonal.recommendation}\n\n"
    )
    text += _guidance(primary)
    text += f"【总体建议】\n{primary['interpretation']['advice']}\n"
    return text


def generate_enhanced_advice(
    primary: Dict[str, Any],
    transformed: Optional[Dict[str, Any]],
    related: RelatedHexagrams,
    seasonal: SeasonalInfluence,
    analysis: Optional[QuestionAnalysis],
) -> List[str]:
    advice = [
        primary["interpretation"]["advice"],
        seasonal.recommendation,
        _describe_trigram("上卦", primary["trigrams"]["upper"], compact=True),
        _describe_trigram("下卦", primary["trigrams"]["lower"], compact=True),
        f"内在趋势为{related.mutual['chinese_name']}，需要关注内在修养",
    ]
    if transformed:
        advice.append(f"事态将向{transformed['chinese_name']}卦发展，需要提前做好准备")
    if analysis and analysis.category in CATEGORY_ADVICE:
        advice.append(CATEGORY_ADVICE[analysis.category])
    advice.extend(
        [
            "周易的智慧在于顺应天时，把握变化的规律",
            "保持中正之道，不偏不倚，方能趋吉避凶",
            "刚柔并济，动静结合，是为上策",
        ]
    )
    return advice


def generate_enhanced_reading(
    method: str,
    moment: Optional[datetime] = None,
    numbers: Optional[Sequence[int]] = None,
    question: Optional[str] = None,
) -> IChingReading:
    moment = moment or datetime.now()
    index, changing_lines = cast(method, moment, numbers)
    primary = get_hexagram_by_index(index)
    transformed = transformed_hexagram(index, changing_lines)

    analysis = analyze_question(question) if question else None
    related = analyze_related_hexagrams(primary)
    line_analysis = analyze_lines(changing_lines)
    seasonal = analyze_seasonal_influence(moment)
    wuxing = analyze_wuxing(primary)
    logger.debug(f"I Ching cast ({method}): {primary['chinese_name']} changing={changing_lines}")

    return IChingReading(
        primary_hexagram=primary,
        changing_lines=changing_lines,
        transformed_hexagram=transformed,
        question_analysis=analysis,
        related_hexagrams=related,
        line_analysis=line_analysis,
        seasonal_influence=seasonal,
        wuxing_analysis=wuxing,
        interpretation=f"{primary['chinese_name']}卦：{primary['interpretation']['general']}",
        advice=generate_enhanced_advice(primary, transformed, related, seasonal, analysis),
        detailed_interpretation=generate_detailed_interpretation(
            primary, changing_lines, transformed, related, line_analysis, seasonal, wuxing, analysis, question
        ),
    )
