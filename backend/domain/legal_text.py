"""Standard bilingual legal text printed on every certificate (not user-authored)"""
from domain.entities.certificate import BilingualText, LegalText


DEFAULT_RIGHTS = BilingualText(
    primary="""This certificate grants the registered owner the following rights:
1. Right to use the land for the specified purpose
2. Right to build structures according to local regulations
3. Right to transfer ownership through proper legal channels
4. Right to inherit and bequeath the land
5. Right to access the land
6. Right to lease or rent the land
7. Right to compensation if taken by the government

These rights are subject to applicable federal and local laws, regulations, and restrictions.""",
    local="""ይህ የምስክር ወረቀት ለተመዘገበው ባለቤት የሚከተሉትን መብቶች ይሰጣል:
1. መሬቱን ለተገለጸው ዓላማ የመጠቀም መብት
2. በአካባቢው ደንቦች መሰረት ግንባታዎችን የመገንባት መብት
3. ባለቤትነትን በትክክለኛ የህግ ቻናሎች የማስተላለፍ መብት
4. መሬቱን የመውረስ እና የማውረስ መብት
5. መሬቱን የመድረስ መብት
6. የማስያዝ ወይም የማከራየት መብት
7. በመንግስት ሲወሰድ ካሳ የማግኘት መብት

እነዚህ መብቶች በሚተገበሩ ፌዴራል እና አካባቢያዊ ህጎች፣ ደንቦች እና ገደቦች መሰረት ይሆናሉ።""",
)

DEFAULT_TERMS = BilingualText(
    primary="""The certificate holder agrees to the following terms and conditions:
1. All information provided during registration must be accurate and truthful
2. The land must be used in accordance with applicable zoning regulations
3. Property taxes and applicable fees must be paid in a timely manner
4. Any transfer of ownership must follow the prescribed legal procedures
5. The certificate holder must report any changes in ownership information
6. The certificate may be revoked if obtained through fraudulent means
7. Disputes regarding the land will be resolved through the appropriate legal channels
8. The certificate holder must comply with all environmental regulations
9. Access must be granted to authorized government representatives for inspection purposes
10. Failure to comply with these terms may result in penalties or certificate revocation""",
    local="""የምስክር ወረቀቱ ባለቤት ከሚከተሉት ውሎች እና ሁኔታዎች ጋር ይስማማል፡
1. በምዝገባ ወቅት የቀረበው መረጃ ሁሉ ትክክለኛ እና እውነተኛ መሆን አለበት
2. መሬቱ ተፈጻሚ ከሚሆኑ የዞን ደንቦች ጋር በሚጣጣም መልኩ መጠቀም አለበት
3. የንብረት ግብሮች እና ተፈጻሚ የሚሆኑ ክፍያዎች በወቅቱ መከፈል አለባቸው
4. ማንኛውም የባለቤትነት ዝውውር የተወሰኑ ህጋዊ ሂደቶችን መከተል አለበት
5. የምስክር ወረቀቱ ባለቤት በባለቤትነት መረጃ ላይ የሚደረጉ ለውጦችን ሁሉ ማሳወቅ አለበት
6. ምስክር ወረቀቱ በማጭበርበር መንገድ ከተገኘ ሊሰረዝ ይችላል
7. መሬቱን በተመለከተ ያሉ ክርክሮች በተገቢው ህጋዊ መንገዶች ይፈታሉ""",
)


def default_legal_text() -> LegalText:
    return LegalText(rights=DEFAULT_RIGHTS, terms=DEFAULT_TERMS)
