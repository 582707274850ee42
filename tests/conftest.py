import pytest

VISIT_HEADER = (
    "معرف الفرع*,معرف العقد*,معرف الشركة*,نوع الزيارة*,حالة الزيارة*,تاريخ الجدولة*,"
    "وقت الجدولة,تاريخ التنفيذ,وقت التنفيذ,المدة المتوقعة,خدمة التكييف,خدمة الكهرباء,"
    "خدمة السباكة,خدمة النجارة,خدمة الدهان,خدمة التنظيف,خدمة الحدادة,خدمة السيراميك,"
    "خدمة الزجاج,خدمة الألمنيوم,خدمة الأرضيات,خدمة الأسقف,خدمة الجدران,حالة الزيارة,"
    "ملاحظات,مصدر البيانات"
)


def visit_row(
    branch="0033-JED-007-0007",
    company="0033",
    status="completed",
    second_status="completed",
    overall="passed",
    source="system-import",
):
    cols = [
        branch, "0033-007", company, "regular", status, "05-Mar-2025",
        "09:00", "05-Mar-2025", "11:30", "150",
    ]
    cols += [""] * 13
    cols += [second_status, overall, source]
    return ",".join(cols)


@pytest.fixture
def header():
    return VISIT_HEADER


@pytest.fixture
def make_row():
    return visit_row
