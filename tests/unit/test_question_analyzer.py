from app.services.divination.question_analyzer import analyze_question, contextual_opening


def test_empty_question_defaults():
    analysis = analyze_question(None)
    assert analysis.category == "general"
    assert analysis.sentiment == "neutral"
    assert analysis.urgency == "low"
    assert analysis.keywords == []


def test_love_question_positive():
    analysis = analyze_question("我的感情会顺利吗")
    assert analysis.category == "love"
    assert analysis.sentiment == "positive"
    assert "感情" in analysis.keywords
    assert analysis.aspects == ["love"]


def test_career_question_negative():
    analysis = analyze_question("我很担心工作失败")
    assert analysis.category == "career"
    assert analysis.sentiment == "negative"


def test_urgency_levels():
    assert analyze_question("紧急，合同怎么办").urgency == "high"
    assert analyze_question("近期的考试").urgency == "medium"


def test_timeframe():
    assert analyze_question("明年的事业发展").timeframe == "future"
    assert analyze_question("目前的财运").timeframe == "present"


def test_keywords_capped():
    analysis = analyze_question("爱情感情恋爱婚姻伴侣对象喜欢")
    assert len(analysis.keywords) == 5


def test_contextual_opening_mentions_question():
    question = "我很担心工作失败"
    opening = contextual_opening(question, analyze_question(question))
    assert question in opening
    assert "事业" in opening
