# app/services/divination_services.py
import logging
import re
from typing import Any, Dict, List, Tuple

from app.models.divination_models import (
    AstrologyRequest,
    BaziRequest,
    DivinationRequest,
    PredictionResult,
    TarotRequest,
    YijingRequest,
)
from app.services.divination import (
    astrology_services,
    bazi_services,
    iching_services,
    tarot_services,
)

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 200
MAX_CONTENT_LENGTH = 5000
TRUNCATION_MARK = "……"
CLOSING_NOTE = (
    "\n\n【结语】\n以上解读基于传统占卜方法生成，仅供参考与自我反思。"
    "命运掌握在自己手中，愿您保持积极的心态，用行动创造属于自己的美好未来。"
)
DEFAULT_ADVICE = ["保持积极的心态，用行动创造美好未来"]

ADVICE_HEADINGS = ("【指引与建议】\n", "【建议】\n")
NUMBERED_LINE = re.compile(r"^\d+\.\s*")


def normalize_content(content: str) -> str:
    """Bring generated prose within the bounds a stored prediction accepts."""
    content = content.strip()
    while len(content) < MIN_CONTENT_LENGTH:
        content += CLOSING_NOTE
    if len(content) > MAX_CONTENT_LENGTH:
        content = content[: MAX_CONTENT_LENGTH - len(TRUNCATION_MARK)] + TRUNCATION_MARK
    return content


def build_result(title: str, content: str, summary: str, advice: List[str], imagery: str = None) -> PredictionResult:
    return PredictionResult(
        title=title[:200],
        content=normalize_content(content),
        summary=summary[:500],
        advice=[item for item in advice if item] or list(DEFAULT_ADVICE),
        imagery=imagery,
    )


def input_data(request: DivinationRequest) -> Dict[str, Any]:
    return request.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"enhanced"})


def extract_tarot_advice(interpretation: str) -> List[str]:
    section = None
    for heading in ADVICE_HEADINGS:
        parts = interpretation.split(heading, 1)
        if len(parts) > 1:
            section = parts[1]
            break

    advice = []
    if section:
        for line in section.split("\n"):
            line = line.strip()
            if NUMBERED_LINE.match(line):
                advice.append(NUMBERED_LINE.sub("", line).strip())
    return advice or list(tarot_services.GENERIC_ADVICE)


def run_tarot(request: TarotRequest) -> Tuple[Dict[str, Any], PredictionResult]:
    generate = tarot_services.generate_enhanced_reading if request.enhanced else tarot_services.generate_basic_reading
    reading = generate(
        request.spread_type,
        name=request.name,
        birth_date=request.birth_date,
        question=request.question,
        seed=request.seed,
    )

    result = build_result(
        title=f"塔罗牌占卜 - {reading.spread}",
        content=reading.interpretation,
        summary=f"使用{reading.spread}为您进行占卜，抽取了{len(reading.cards)}张牌",
        advice=extract_tarot_advice(reading.interpretation),
        imagery=reading.cards[0].card["name"] if reading.cards else None,
    )
    data = {
        "serviceType": "tarot",
        "spread": reading.spread,
        "cards": [
            {
                "name": drawn.card["name"],
                "nameEn": drawn.card["name_en"],
                "position": drawn.position,
                "isReversed": drawn.is_reversed,
                "suit": drawn.card["suit"],
            }
            for drawn in reading.cards
        ],
    }
    return data, result


def _fortune_sections(fortune) -> str:
    return (
        f"【综合运势】\n{fortune.overall}\n\n"
        f"【爱情运势】\n{fortune.love}\n\n"
        f"【事业运势】\n{fortune.career}\n\n"
        f"【健康运势】\n{fortune.health}\n\n"
        f"【财运】\n{fortune.finance}\n\n"
    )


def run_astrology(request: AstrologyRequest) -> Tuple[Dict[str, Any], PredictionResult]:
    if request.enhanced:
        reading = astrology_services.generate_enhanced_reading(request.birth_date, question=request.question)
        lucky = reading.lucky_elements
        content = (
            reading.detailed_interpretation
            + "\n"
            + _fortune_sections(reading.fortune)
            + f"【幸运元素】\n幸运颜色：{lucky.color}\n幸运数字：{lucky.number}\n"
            f"幸运方位：{lucky.direction}\n幸运时间：{lucky.time}"
        )
    else:
        reading = astrology_services.generate_basic_reading(request.birth_date)
        sign, lucky = reading.sign, reading.lucky_elements
        content = (
            f"【星座】{sign['name']} ({sign['name_en']})\n{sign['element']}象 | {sign['quality']}\n\n"
            + _fortune_sections(reading.fortune)
            + f"【幸运元素】\n幸运颜色：{lucky.color}\n幸运数字：{lucky.number}\n幸运方位：{lucky.direction}"
        )

    sign = reading.sign
    result = build_result(
        title=f"{sign['name']}运势预测",
        content=content,
        summary=f"{sign['name']}座今日运势，{sign['element']}象星座",
        advice=reading.advice,
        imagery=sign["name"],
    )
    data = {
        "serviceType": "astrology",
        "sign": {
            "name": sign["name"],
            "nameEn": sign["name_en"],
            "element": sign["element"],
            "quality": sign["quality"],
        },
        "fortune": reading.fortune.model_dump(),
        "luckyElements": reading.lucky_elements.model_dump(exclude_none=True),
    }
    return data, result


def _pillar_line(label: str, pillar) -> str:
    return (
        f"{label}：{pillar.name} ({pillar.stem['name']}{pillar.stem['element']} "
        f"{pillar.branch['name']}{pillar.branch['element']})"
    )


def run_bazi(request: BaziRequest) -> Tuple[Dict[str, Any], PredictionResult]:
    hour = request.birth_time.hour if request.birth_time else None

    if request.enhanced:
        reading = bazi_services.generate_enhanced_reading(
            request.birth_date, hour=hour, gender=request.gender, question=request.question
        )
        content = reading.detailed_interpretation + "\n\n"
    else:
        reading = bazi_services.generate_basic_reading(request.birth_date, hour=hour)
        chart, elements = reading.chart, reading.elements
        distribution = " | ".join(f"{element}：{count}" for element, count in elements.distribution.items())
        lacking = f"缺失五行：{'、'.join(elements.lacking)}" if elements.lacking else "五行齐全"
        content = (
            "【八字命盘】\n"
            + "\n".join(
                _pillar_line(label, pillar)
                for label, pillar in zip(("年柱", "月柱", "日柱", "时柱"), chart.pillars)
            )
            + f"\n\n【五行分布】\n{distribution}\n主导五行：{elements.dominant}\n{lacking}\n\n"
        )

    fortune = reading.fortune
    content += (
        f"【性格分析】\n{reading.personality}\n\n"
        f"【事业运势】\n{fortune.career}\n\n"
        f"【财运分析】\n{fortune.wealth}\n\n"
        f"【健康运势】\n{fortune.health}\n\n"
        f"【感情运势】\n{fortune.relationships}"
    )

    chart = reading.chart
    result = build_result(
        title="生辰八字命理分析",
        content=content,
        summary=(
            f"八字：{chart.year.name} {chart.month.name} {chart.day.name} {chart.hour.name}，"
            f"主导五行{reading.elements.dominant}"
        ),
        advice=reading.advice,
        imagery=chart.year.branch["zodiac"],
    )
    data = {
        "serviceType": "bazi",
        "chart": chart.model_dump(),
        "elements": reading.elements.model_dump(exclude_none=True),
    }
    return data, result


def run_yijing(request: YijingRequest) -> Tuple[Dict[str, Any], PredictionResult]:
    generate = iching_services.generate_enhanced_reading if request.enhanced else iching_services.generate_basic_reading
    reading = generate(request.method, moment=request.timestamp, numbers=request.numbers, question=request.question)

    content = reading.detailed_interpretation if request.enhanced else reading.interpretation
    primary, transformed = reading.primary_hexagram, reading.transformed_hexagram
    if reading.changing_lines:
        moving = f"第{'、'.join(str(line) for line in reading.changing_lines)}爻动"
    else:
        moving = "无动爻"

    result = build_result(
        title=f"周易占卜 - {primary['chinese_name']}卦",
        content=content,
        summary=f"得{primary['chinese_name']}卦，{moving}",
        advice=reading.advice,
        imagery=primary["chinese_name"],
    )
    data = {
        "serviceType": "yijing",
        "primaryHexagram": {
            "number": primary["number"],
            "chineseName": primary["chinese_name"],
            "name": primary["name"],
            "trigrams": primary["trigrams"],
        },
        "changingLines": reading.changing_lines,
        "transformedHexagram": (
            {
                "number": transformed["number"],
                "chineseName": transformed["chinese_name"],
                "name": transformed["name"],
            }
            if transformed
            else None
        ),
    }
    return data, result
