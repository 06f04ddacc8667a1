from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BilingualBlock:
    english: str
    arabic: str
    bold: bool = False
    heading: bool = False
    page_break_before: bool = False


def greeting(client_name: str) -> BilingualBlock:
    name = client_name or '________________'
    return BilingualBlock(f'Dear Mr. {name}', f'الأفاضل/ {name} المحترمون', bold=True)


def contact_paragraph(company_en: str, company_email: str, company_phone: str) -> BilingualBlock:
    return BilingualBlock(
        (
            f'Thank you for choosing {company_en} to carry out the inspection of your property. '
            'This report presents the inspection findings and measurements as documented on site on the '
            'date of the visit, and the presence of certain observations is common in property inspections.'
            '\n\nPlease review the attached report carefully before making your final decision. If you '
            'require any further clarification regarding the condition of the property, please feel free to '
            'contact us by phone or email between 9:00 a.m. and 5:00 p.m.'
            f'\n\nEmail: {company_email}\nMobile: {company_phone}'
        ),
        (
            'نشكر لكم اختياركم "وصلة للحلول العقارية" للقيام بفحص العقار الخاص بكم. يُقدم هذا التقرير نتائج '
            'الفحص والقياسات كما تم توثيقها ميدانيًا في تاريخ الزيارة، ووجود بعض الملاحظات يُعد أمر شائع في '
            'عمليات الفحص العقاري.'
            '\n\nيرجى مراجعة التقرير المرفق بعناية قبل اتخاذ قراركم النهائي، و إذا كنتم بحاجة إلى توضيحات '
            'إضافية حول حالة العقار، فلا تترددوا بالتواصل معنا عبر الهاتف أو البريد الإلكتروني من الساعة 9 '
            'صباحًا حتى 5 مساءً على وسائل التواصل التالية:'
            f'\n\nالبريد الإلكتروني: {company_email}\nالهاتف: {company_phone}'
        ),
    )


DISCLAIMER_BLOCKS: tuple[BilingualBlock, ...] = (
    BilingualBlock('No property is perfect.', 'لا يوجد عقار مثالي', bold=True),
    BilingualBlock(
        'Every building has imperfections or items that are ready for maintenance. It is the inspector\'s '
        'task to discover and report these so you can make informed decisions. This report should not be '
        'used as a tool to demean property, but rather as a way to illuminate the realities of the property.',
        'كل عقار يحتوي على بعض العيوب أو الأجزاء التي تحتاج إلى صيانة. دور المفتش هو تحديد هذه النقاط '
        'وتقديمها بوضوح لمساعدتكم في اتخاذ قرارات مستنيرة. هذا التقرير لا يُقصد به التقليل من قيمة العقار، '
        'وإنما يهدف إلى توضيح الحالة الواقعية له.',
    ),
    BilingualBlock('This report is not an appraisal.', 'هذا التقرير ليس تقييماً سعرياً', bold=True),
    BilingualBlock(
        'When an appraiser determines worth, only the most obvious conditions of a property are taken into '
        'account to establish a safe loan amount. In effect, the appraiser is representing the interests of '
        'the lender. Home inspectors focus more on the interests of the prospective buyer; and, although '
        'inspectors must be careful not to make any statements relating to property value, their findings '
        'can help buyers more completely understand the true costs of ownership.',
        'عند قيام المثمن بتحديد قيمة العقار، فإنه يأخذ بعين الاعتبار فقط العيوب الظاهرة لتقدير مبلغ قرض آمن. '
        'بمعنى آخر، فإن المثمن يُمثل مصلحة الجهة المُقرضة. أما فاحص العقار، فيركز على مصلحة المشتري المحتمل. '
        'ورغم أن المفتش لا يحدد قيمة العقار، إلا أن نتائج الفحص تساعد المشتري في فهم التكاليف الحقيقية '
        'لامتلاك العقار.',
    ),
    BilingualBlock(
        'Maintenance costs are normal.',
        'تكاليف الصيانة أمر طبيعي',
        bold=True,
        page_break_before=True,
    ),
    BilingualBlock(
        'Homeowners should plan to spend around 1% of the total value of a property in maintenance costs, '
        'annually. (Annual costs of rental property maintenance are often 2%, or more.) If considerably less '
        'than this percentage has been invested during several years preceding an inspection, the property '
        'will usually show the obvious signs of neglect; and the new property owners may be required to '
        'invest significant time and money to address accumulated maintenance needs.',
        'ينبغي على مالكي العقارات تخصيص ما يُعادل 1% من قيمة العقار سنويًا لأعمال الصيانة الدورية. أما '
        'العقارات المؤجرة فقد تصل النسبة إلى 2% أو أكثر. وإذا لم يتم استثمار هذه النسبة على مدى عدة سنوات، '
        'فستظهر مؤشرات واضحة على الإهمال، مما يُحتم على المالك الجديد دفع تكاليف كبيرة لاحقًا لمعالجة هذه '
        'الإهمالات.',
    ),
    BilingualBlock('SCOPE OF THE INSPECTION', 'نطاق الفحص', heading=True),
    BilingualBlock(
        'This report details the outcome of a visual survey of the property detailed in the annexed '
        'inspection checklist in order to check the quality of workmanship against applicable standards. It '
        'covers both the interior and the exterior of the property as well as garden, driveway and garage if '
        'relevant. Areas not inspected, for whatever reason, cannot guarantee that these areas are free from '
        'defects.\n\nThis report was formed as per the client request as a supportive opinion to enable him '
        'to have better understanding about property conditions. Our opinion does not study the property '
        'value or the engineering of the structure rather it studies the functionality of the property.',
        'يوضح هذا التقرير نتيجة الفحص البصري للعقار كما هو مفصل في قائمة الفحص المرفقة، بهدف تقييم جودة '
        'التنفيذ مقارنة بالمعايير المعتمدة. يشمل الفحص المناطق الداخلية والخارجية، بالإضافة إلى الحديقة، '
        'والممر، والجراج ( إن وُجد). كما لا يمكن ضمان خلو المناطق غير المفحوصة من العيوب لأي سببٍ كان.'
        '\n\nوقد تم إعداد هذا التقرير بناءً على طلب العميل لتقديم رأي داعم يساعده على فهم حالة العقار بشكل '
        'أفضل. رأينا الفني لا يشمل تقييم القيمة السوقية أو التحليل الإنشائي، بل يركز على حالة العقار ووظائفه '
        'العامة.',
    ),
    BilingualBlock('CONFIDENTIALITY OF THE REPORT', 'سرية التقرير', heading=True),
    BilingualBlock(
        'The inspection report is prepared for the Client for the purpose of informing of the major '
        'deficiencies in the condition of the subject property and is solely and exclusively for the '
        'Client\'s own information and may not be relied upon by any other person. Client may distribute '
        'copies of the inspection report to the seller and the real estate agents directly involved in this '
        'transaction, but Client and Inspector do not in any way intend to benefit said seller or the real '
        'estate agents directly or indirectly through this Agreement or the inspection report.',
        'تم إعداد تقرير الفحص هذا خصيصًا للعميل بغرض إعلامه بالنواقص الجوهرية في حالة العقار محل الفحص، وهو '
        'للاستخدام الشخصي فقط ولا يجوز الاعتماد عليه من قبل أي طرف آخر. يجوز للعميل مشاركة نسخة من التقرير '
        'مع البائع أو وكلاء العقارات المعنيين بهذه الصفقة، إلا أن كل من العميل والفاحص لا يقصدان من خلال هذا '
        'التقرير تحقيق أي منفعة مباشرة أو غير مباشرة لهؤلاء الأطراف.',
    ),
)
