# app/services/divination/question_analyzer.py
from pydantic import BaseModel
from typing import Dict, List, Optional, Tuple

CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "love": ("爱情", "感情", "恋爱", "婚姻", "伴侣", "对象", "喜欢", "爱", "分手", "复合", "表白", "约会", "结婚", "离婚", "暗恋", "单身", "桃花"),
    "career": ("工作", "事业", "职业", "升职", "跳槽", "面试", "老板", "同事", "公司", "项目", "业绩", "晋升", "辞职", "创业", "合作"),
    "wealth": ("财运", "金钱", "财富", "投资", "理财", "赚钱", "收入", "工资", "奖金", "股票", "基金", "生意", "买卖", "借钱", "还钱"),
    "health": ("健康", "身体", "疾病", "生病", "医院", "治疗", "养生", "锻炼", "减肥", "体检", "手术", "康复", "精神", "心理"),
    "study": ("学习", "考试", "学业", "成绩", "升学", "毕业", "论文", "考研", "留学", "培训", "证书", "技能"),
    "family": ("家庭", "父母", "孩子", "亲人", "家人", "兄弟", "姐妹", "长辈", "晚辈", "亲戚", "家事", "搬家"),
    "decision": ("选择", "决定", "该不该", "要不要", "是否", "怎么办", "如何", "方向", "道路", "机会", "风险"),
    "general": ("运势", "未来", "命运", "前途", "发展", "变化", "趋势", "吉凶", "好坏"),
}

TIME_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "past": ("过去", "以前", "曾经", "之前", "原来", "当初"),
    "present": ("现在", "目前", "当前", "此刻", "眼下", "最近"),
    "future": ("未来", "将来", "以后", "今后", "明天", "下个月", "明年", "会不会", "能不能"),
    "general": ("一直", "总是", "经常", "通常", "整体"),
}

URGENCY_KEYWORDS = (
    (3, ("紧急", "马上", "立刻", "急", "赶紧", "尽快", "现在就", "迫切")),
    (2, ("近期", "最近", "不久", "快要", "即将")),
    (1, ("长远", "以后", "将来", "未来", "慢慢")),
)

POSITIVE_WORDS = ("好", "顺利", "成功", "幸福", "开心", "快乐", "希望", "机会", "发展", "进步")
NEGATIVE_WORDS = ("不好", "失败", "困难", "问题", "担心", "害怕", "焦虑", "痛苦", "分手", "失去", "危机")

CATEGORY_NAMES = {
    "love": "感情",
    "career": "事业",
    "wealth": "财运",
    "health": "健康",
    "study": "学业",
    "family": "家庭",
    "decision": "抉择",
    "general": "运势",
}

MAX_KEYWORDS = 5


class QuestionAnalysis(BaseModel):
    category: str = "general"
    keywords: List[str] = []
    sentiment: str = "neutral"
    timeframe: str = "general"
    aspects: List[str] = []
    urgency: str = "low"


def _count_hits(text: str, words) -> int:
    return sum(1 for word in words if word in text)


def _best_by_score(scores: Dict[str, int], default: str) -> str:
    # Strict comparison: on a tie the earlier dictionary entry wins.
    best, best_score = default, 0
    for key, score in scores.items():
        if score > best_score:
            best, best_score = key, score
    return best


def identify_category(text: str) -> str:
    scores = {category: _count_hits(text, words) for category, words in CATEGORY_KEYWORDS.items()}
    return _best_by_score(scores, "general")


def extract_keywords(text: str, category: str) -> List[str]:
    return [word for word in CATEGORY_KEYWORDS[category] if word in text][:MAX_KEYWORDS]


def analyze_sentiment(text: str) -> str:
    positive = _count_hits(text, POSITIVE_WORDS)
    negative = _count_hits(text, NEGATIVE_WORDS)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def identify_timeframe(text: str) -> str:
    scores = {timeframe: _count_hits(text, words) for timeframe, words in TIME_KEYWORDS.items()}
    return _best_by_score(scores, "general")


def identify_aspects(text: str) -> List[str]:
    return [
        category
        for category, words in CATEGORY_KEYWORDS.items()
        if category != "general" and any(word in text for word in words)
    ]


def assess_urgency(text: str) -> str:
    score = sum(weight * _count_hits(text, words) for weight, words in URGENCY_KEYWORDS)
    if score >= 3:
        return "high"
    if score >= 2:
        return "medium"
    return "low"


def analyze_question(question: Optional[str]) -> QuestionAnalysis:
    """Classify a free-text question by keyword hits. Pure function of the text."""
    if not question:
        return QuestionAnalysis()

    text = question.lower()
    category = identify_category(text)
    return QuestionAnalysis(
        category=category,
        keywords=extract_keywords(text, category),
        sentiment=analyze_sentiment(text),
        timeframe=identify_timeframe(text),
        aspects=identify_aspects(text),
        urgency=assess_urgency(text),
    )


def contextual_opening(question: str, analysis: QuestionAnalysis) -> str:
    opening = f"关于您的{CATEGORY_NAMES[analysis.category]}问题：\"{question}\"\n\n"

    if analysis.urgency == "high":
        opening += "我感受到您的急切心情，让我们深入探索这个问题。\n\n"
    elif analysis.sentiment == "negative":
        opening += "我理解您当前的困扰，让我们一起寻找答案和方向。\n\n"
    elif analysis.sentiment == "positive":
        opening += "您的积极态度很好，让我们看看未来的发展趋势。\n\n"

    return opening
